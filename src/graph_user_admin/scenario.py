"""Fixed user lifecycle script: list, create, read, update, change password, delete."""

from __future__ import annotations

import sys
import uuid
from typing import IO, Any, Dict, List, Optional, Tuple

from .config import AppConfig
from .models import ObjectIdentity, PasswordProfile, User
from .operations import UserOperations

DEFAULT_NEW_PASSWORD = "newpassword!"
LINE_FORMAT = "> {label:<30}: {value}"


def _display(value: Any) -> str:
    return "" if value is None else str(value)


def format_user(user: User, extension_prefix: str = "") -> List[str]:
    lines = []

    def add(label: str, value: Any) -> None:
        lines.append(LINE_FORMAT.format(label=label, value=_display(value)))

    add("Id", user.id)
    add("DisplayName", user.display_name)
    for identity in user.identities or []:
        add(f"Identities.{identity.sign_in_type}", identity.issuer_assigned_id)
    add("UserPrincipalName", user.user_principal_name)
    add("MailNickname", user.mail_nickname)
    add("AccountEnabled", user.account_enabled)
    if user.password_profile is not None:
        add("PasswordProfile.Force...NextSignIn", user.password_profile.force_change_password_next_sign_in)
        add(
            "PasswordProfile.Force...NextSignInWithMfa",
            user.password_profile.force_change_password_next_sign_in_with_mfa,
        )
    add("PasswordPolicies", user.password_policies)
    for index, mail in enumerate(user.other_mails or []):
        add(f"OtherMails[{index}]", mail)
    add("EmployeeId", user.employee_id)
    for key, value in user.extension_attributes(extension_prefix).items():
        add(f"AdditionalData.{key}", value)
    return lines


class UserLifecycleScenario:
    """Runs the sample user lifecycle against a tenant, one step after another.

    Progress and user details are written to ``out``. Any failure propagates
    and ends the run; a user created before the failure is left in place.
    """

    def __init__(self, operations: UserOperations, config: AppConfig, out: Optional[IO[str]] = None):
        self.operations = operations
        self.config = config
        self.out = out or sys.stdout

    # -- sample payloads -------------------------------------------------------

    def _custom(self, values: Dict[str, Any]) -> Dict[str, Any]:
        # Configured attributes without a sample value are left unset.
        prefix = self.config.extension_prefix
        if not prefix:
            return {}
        return {prefix + name: values[name] for name in self.config.custom_attributes if name in values}

    def _identities(self, user_name: str) -> List[ObjectIdentity]:
        return [
            ObjectIdentity(sign_in_type="userName", issuer=self.config.tenant_id, issuer_assigned_id=user_name),
            ObjectIdentity(
                sign_in_type="emailAddress",
                issuer=self.config.tenant_id,
                issuer_assigned_id=f"{user_name}@example.com",
            ),
        ]

    def build_new_user(self) -> Tuple[User, Dict[str, Any]]:
        # UPN and mail nickname follow the portal's convention of a fresh GUID.
        new_guid = str(uuid.uuid4())
        user = User(
            display_name="Test User 1",
            identities=self._identities("testuser01"),
            user_principal_name=f"{new_guid}@{self.config.tenant_id}",
            mail_nickname=new_guid,
            account_enabled=True,
            password_profile=PasswordProfile(
                password="password",
                force_change_password_next_sign_in=False,
            ),
            password_policies="DisablePasswordExpiration, DisableStrongPassword",
            employee_id="A12346",
        )
        return user, self._custom({"customString": "Hello", "customInt": 123456, "customBoolean": True})

    def build_simple_user(self) -> User:
        new_guid = str(uuid.uuid4())
        return User(
            display_name="Test User 2",
            user_principal_name=f"{new_guid}@{self.config.tenant_id}",
            mail_nickname=new_guid,
            account_enabled=True,
            password_profile=PasswordProfile(password="P@ssword!"),
        )

    def build_update(self) -> Tuple[User, Dict[str, Any]]:
        user = User(
            display_name="Test User 1 Updated",
            identities=self._identities("testuser01update"),
            user_principal_name=f"test1234567890@{self.config.tenant_id}",
            # Blocks sign-in.
            account_enabled=False,
            other_mails=["contact1@example.com", "contact2@example.com"],
        )
        return user, self._custom({"customString": "Hello update", "customInt": 654321, "customBoolean": False})

    # -- steps -----------------------------------------------------------------

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    def list_users(self) -> List[User]:
        self._print("getting user list...")
        users = self.operations.list_users(top=self.config.page_size)
        self._print(f"User Count: {len(users)}")
        for user in users:
            self._print(f"ObjectId={user.id}, displayName={user.display_name}")
        self._print()
        return users

    def show_user(self, user_id: str) -> User:
        self._print("getting user...")
        user = self.operations.get_user(user_id, self.config.extension_attribute_names)
        for line in format_user(user, self.config.extension_prefix):
            self._print(line)
        self._print()
        return user

    def create_user(self) -> str:
        self._print("creating user...")
        user, extensions = self.build_new_user()
        created = self.operations.create_user(user, extensions)
        self._print(f"created: Id={created.id}")
        self._print()
        return created.id

    def create_simple_user(self) -> str:
        self._print("creating simple user...")
        created = self.operations.create_user(self.build_simple_user())
        self._print(f"created: Id={created.id}")
        self._print()
        return created.id

    def update_user(self, user_id: str) -> None:
        self._print("updating user...")
        user, extensions = self.build_update()
        self.operations.update_user(user_id, user, extensions)
        self._print(f"updated: Id={user_id}")
        self._print()

    def update_password(self, user_id: str, password: str) -> None:
        self._print("updating user password...")
        self.operations.update_password(user_id, password)
        self._print(f"updated: Id={user_id}")
        self._print()

    def delete_user(self, user_id: str) -> None:
        self._print("deleting user...")
        self.operations.delete_user(user_id)
        self._print(f"deleted: Id={user_id}")
        self._print()

    def run(self, new_password: str = DEFAULT_NEW_PASSWORD) -> str:
        self.list_users()

        user_id = self.create_user()
        self.show_user(user_id)

        self.update_user(user_id)
        self.show_user(user_id)

        self.update_password(user_id, new_password)

        self.delete_user(user_id)
        return user_id
