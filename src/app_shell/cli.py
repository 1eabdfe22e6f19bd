import argparse
import json
import logging
import sys

from src.api.deps import build_config_service
from src.app_shell.config import load_app_config
from src.components.settings import SystemConfigService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")

MASKED_FIELDS = ("client_secret", "backup_basic_auth_password")


def get_service() -> SystemConfigService:
    try:
        app_config = load_app_config()
    except ValueError as e:
        logger.error("%s", e)
        sys.exit(1)
    return build_config_service(app_config)


def handle_init(service: SystemConfigService) -> None:
    config = service.get()
    print(f"Config ready (etag {config.etag}).")


def handle_show(service: SystemConfigService, args: argparse.Namespace) -> None:
    record = service.get().to_record()
    if not args.reveal:
        for key in MASKED_FIELDS:
            if record.get(key):
                record[key] = "********"
    print(json.dumps(record, indent=2, sort_keys=True))


def handle_rotate_etag(service: SystemConfigService) -> None:
    config = service.rotate_etag()
    print(f"New etag: {config.etag}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Site Config Admin CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # init
    subparsers.add_parser("init", help="Run migrations and create the default config")

    # show
    show_parser = subparsers.add_parser("show", help="Print the stored config record")
    show_parser.add_argument("--reveal", action="store_true", help="Do not mask secrets")

    # rotate-etag
    subparsers.add_parser("rotate-etag", help="Issue a new etag and purge caches")

    args = parser.parse_args()

    service = get_service()

    if args.command == "init":
        handle_init(service)
    elif args.command == "show":
        handle_show(service, args)
    elif args.command == "rotate-etag":
        handle_rotate_etag(service)


if __name__ == "__main__":
    main()
