"""Payload shapes for the Microsoft Graph ``user`` resource.

Only the attributes the sample touches are modelled. Schema extension
attributes (``extension_{appid}_{name}``) are not declared fields; they travel
as extra keys on :class:`User` and are merged into request payloads
explicitly.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def extension_attribute_name(app_client_id: str, attribute: str) -> str:
    return f"extension_{app_client_id.replace('-', '')}_{attribute}"


class GraphModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_graph_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ObjectIdentity(GraphModel):
    sign_in_type: Optional[str] = None
    issuer: Optional[str] = None
    issuer_assigned_id: Optional[str] = None


class PasswordProfile(GraphModel):
    password: Optional[str] = None
    force_change_password_next_sign_in: Optional[bool] = None
    force_change_password_next_sign_in_with_mfa: Optional[bool] = None


class User(GraphModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[str] = None
    display_name: Optional[str] = None
    identities: Optional[List[ObjectIdentity]] = None
    user_principal_name: Optional[str] = None
    mail_nickname: Optional[str] = None
    account_enabled: Optional[bool] = None
    password_profile: Optional[PasswordProfile] = None
    password_policies: Optional[str] = None
    other_mails: Optional[List[str]] = None
    employee_id: Optional[str] = None

    @classmethod
    def graph_field_names(cls) -> List[str]:
        return [field.alias or name for name, field in cls.model_fields.items()]

    def to_graph_payload(self, extensions: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        payload = super().to_graph_payload()
        if extensions:
            payload.update(extensions)
        return payload

    def extension_attributes(self, prefix: str) -> Dict[str, Any]:
        """Extension attributes carried on this user whose names start with ``prefix``."""
        if not prefix:
            return {}
        extras = self.model_extra or {}
        return {key: value for key, value in extras.items() if key.startswith(prefix)}
