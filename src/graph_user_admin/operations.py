from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .audit import JsonAuditLogger
from .graph_client import GraphClient
from .models import PasswordProfile, User


class UserOperations:
    """CRUD operations against the Graph ``/users`` collection."""

    def __init__(self, graph: GraphClient, audit_logger: JsonAuditLogger):
        self.graph = graph
        self.audit = audit_logger

    def list_users(
        self,
        select: Sequence[str] = ("id", "displayName"),
        order_by: Optional[str] = "displayName",
        top: Optional[int] = None,
    ) -> List[User]:
        params: Dict[str, Any] = {"$select": ",".join(select)}
        if order_by:
            params["$orderby"] = order_by
        if top:
            params["$top"] = top

        users: List[User] = []
        for page in self.graph.iter_pages("/users", params=params):
            users.extend(User.model_validate(item) for item in page)
        self.audit.info("users_listed", count=len(users))
        return users

    def get_user(self, user_id: str, extension_attributes: Iterable[str] = ()) -> User:
        # Extension attributes are only returned when named in $select.
        select = User.graph_field_names() + list(extension_attributes)
        response = self.graph.get(f"/users/{user_id}", params={"$select": ",".join(select)})
        return User.model_validate(response.json())

    def create_user(self, user: User, extensions: Optional[Mapping[str, Any]] = None) -> User:
        response = self.graph.post("/users", json=user.to_graph_payload(extensions))
        created = User.model_validate(response.json())
        self.audit.info("user_created", user_id=created.id)
        return created

    def update_user(
        self, user_id: str, user: User, extensions: Optional[Mapping[str, Any]] = None
    ) -> None:
        self.graph.patch(f"/users/{user_id}", json=user.to_graph_payload(extensions))
        self.audit.info("user_updated", user_id=user_id)

    def update_password(
        self, user_id: str, password: str, force_change_next_sign_in: bool = False
    ) -> None:
        update = User(
            password_profile=PasswordProfile(
                password=password,
                force_change_password_next_sign_in=force_change_next_sign_in,
            )
        )
        self.graph.patch(f"/users/{user_id}", json=update.to_graph_payload())
        self.audit.info("user_password_updated", user_id=user_id)

    def delete_user(self, user_id: str) -> None:
        self.graph.delete(f"/users/{user_id}")
        self.audit.info("user_deleted", user_id=user_id)
