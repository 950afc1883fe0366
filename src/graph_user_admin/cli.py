from __future__ import annotations

import argparse
import json
import logging
import uuid
from pathlib import Path
from typing import Any, List, Optional

import httpx

from .audit import JsonAuditLogger
from .auth import ClientCredentialAuthProvider
from .config import AppConfig
from .graph_client import GraphClient
from .operations import UserOperations
from .scenario import DEFAULT_NEW_PASSWORD, UserLifecycleScenario

OPERATIONS = ["run-scenario", "list-users", "get-user", "create-simple-user", "delete-user"]


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Manage Azure AD B2C / Entra ID users through Microsoft Graph"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration YAML (defaults to AZURE_* environment variables)",
    )
    parser.add_argument(
        "--operation",
        default="run-scenario",
        choices=OPERATIONS,
        help="Operation to run",
    )
    parser.add_argument("--user-id", help="Object ID of the user for get-user / delete-user")
    parser.add_argument(
        "--new-password",
        default=DEFAULT_NEW_PASSWORD,
        help="Password set during the scenario's password update step",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Audit log level",
    )
    args = parser.parse_args(argv)
    if args.operation in ("get-user", "delete-user") and not args.user_id:
        parser.error(f"--user-id is required for {args.operation}")
    return args


def load_config(config_path: Optional[str]) -> AppConfig:
    if config_path:
        return AppConfig.load(Path(config_path))
    return AppConfig.from_env()


def build_graph_client(
    config: AppConfig,
    audit_logger: JsonAuditLogger,
    transport: Optional[httpx.BaseTransport] = None,
) -> GraphClient:
    auth = ClientCredentialAuthProvider.from_config(config, audit_logger)
    return GraphClient(config, auth=auth, audit_logger=audit_logger, transport=transport)


def _to_json(value: Any) -> Any:
    if isinstance(value, list):
        return [_to_json(item) for item in value]
    if hasattr(value, "to_graph_payload"):
        return value.to_graph_payload()
    return value


def run(
    args: argparse.Namespace,
    config: AppConfig,
    graph: GraphClient,
    audit_logger: JsonAuditLogger,
    correlation_id: Optional[str] = None,
) -> Any:
    audit_logger.bind(tenant_id=config.tenant_id, correlation_id=correlation_id or str(uuid.uuid4()))
    ops = UserOperations(graph, audit_logger)
    scenario = UserLifecycleScenario(ops, config)

    audit_logger.info("operation_started", operation=args.operation)
    if args.operation == "run-scenario":
        result: Any = {"user_id": scenario.run(new_password=args.new_password)}
    elif args.operation == "list-users":
        result = ops.list_users(top=config.page_size)
    elif args.operation == "get-user":
        result = ops.get_user(args.user_id, config.extension_attribute_names)
    elif args.operation == "create-simple-user":
        result = {"user_id": scenario.create_simple_user()}
    elif args.operation == "delete-user":
        ops.delete_user(args.user_id)
        result = {"user_id": args.user_id, "deleted": True}
    else:
        raise SystemExit(f"Unsupported operation: {args.operation}")
    audit_logger.info("operation_completed", operation=args.operation)
    return result


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    config = load_config(args.config)
    audit_logger = JsonAuditLogger(level=getattr(logging, args.log_level))

    with build_graph_client(config, audit_logger) as graph:
        result = run(args, config, graph, audit_logger)

    if args.operation != "run-scenario":
        print(json.dumps(_to_json(result), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
