import argparse
import getpass
import logging
import sys
from pathlib import Path

from cms_admin.app_shell.config import load_settings
from cms_admin.core.errors import AdminClientError, display_message
from cms_admin.ui.context import AdminContext

logger = logging.getLogger("cli")

ENTITIES = ("articles", "categories", "tags", "users", "packages")


def get_context(config_path: str | None) -> AdminContext:
    try:
        settings = load_settings(Path(config_path) if config_path else None)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    return AdminContext.create(settings)


def handle_login(ctx: AdminContext, args: argparse.Namespace) -> int:
    password = args.password or getpass.getpass("Password: ")
    result = ctx.session.login(args.email, password)
    if not result.success:
        print(f"Login failed: {result.error}", file=sys.stderr)
        return 1
    profile = result.profile
    print(f"Logged in as {profile.email if profile else args.email}.")
    return 0


def handle_logout(ctx: AdminContext, args: argparse.Namespace) -> int:
    ctx.session.logout()
    print("Logged out.")
    return 0


def handle_whoami(ctx: AdminContext, args: argparse.Namespace) -> int:
    profile = ctx.session.profile if ctx.bootstrap() else None
    if profile is None:
        print("Not logged in.", file=sys.stderr)
        return 1
    print(profile.model_dump_json(indent=2))
    return 0


def handle_list(ctx: AdminContext, args: argparse.Namespace) -> int:
    store = ctx.entity_stores()[args.entity]
    store.fetch_list(args.page, args.page_size, args.filter)
    if store.error:
        print(f"Error: {store.error}", file=sys.stderr)
        return 1

    for record in store:
        print(record.model_dump_json(by_alias=True))
    p = store.pagination
    print(f"Page {p.current_page}/{p.total_pages} ({p.total_items} total)")
    return 0


def handle_delete(ctx: AdminContext, args: argparse.Namespace) -> int:
    store = ctx.entity_stores()[args.entity]
    try:
        store.delete(args.id)
    except AdminClientError as e:
        print(f"Error: {display_message(e, 'Delete failed')}", file=sys.stderr)
        return 1
    print(f"Deleted {args.entity} {args.id}.")
    return 0


def handle_keys(ctx: AdminContext, args: argparse.Namespace) -> int:
    store = ctx.package_keys
    store.fetch_list(args.package_id, args.page, args.page_size)
    if store.error:
        print(f"Error: {store.error}", file=sys.stderr)
        return 1

    for key in store:
        state = "purchased" if key.is_purchased else "available"
        print(f"{key.id}\t{key.content}\t{state}")
    p = store.pagination
    print(f"Page {p.current_page}/{p.total_pages} ({p.total_items} total)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CMS admin console")
    parser.add_argument("--config", help="Path to a YAML config file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # login
    login_parser = subparsers.add_parser("login", help="Log in and store the access token")
    login_parser.add_argument("email")
    login_parser.add_argument("--password", help="Prompted for when omitted")

    # logout / whoami
    subparsers.add_parser("logout", help="Forget the stored access token")
    subparsers.add_parser("whoami", help="Show the current profile")

    # list
    list_parser = subparsers.add_parser("list", help="List one page of an entity")
    list_parser.add_argument("entity", choices=ENTITIES)
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--page-size", type=int, default=None)
    list_parser.add_argument("--filter", default=None, help="Search keyword")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete one record")
    delete_parser.add_argument("entity", choices=ENTITIES)
    delete_parser.add_argument("id")

    # keys
    keys_parser = subparsers.add_parser("keys", help="List license keys of a package")
    keys_parser.add_argument("package_id")
    keys_parser.add_argument("--page", type=int, default=1)
    keys_parser.add_argument("--page-size", type=int, default=None)

    return parser


HANDLERS = {
    "login": handle_login,
    "logout": handle_logout,
    "whoami": handle_whoami,
    "list": handle_list,
    "delete": handle_delete,
    "keys": handle_keys,
}


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    args = build_parser().parse_args(argv)
    ctx = get_context(args.config)
    try:
        if args.command in ("list", "delete", "keys"):
            ctx.bootstrap()
        return HANDLERS[args.command](ctx, args)
    finally:
        ctx.close()


if __name__ == "__main__":
    sys.exit(main())
