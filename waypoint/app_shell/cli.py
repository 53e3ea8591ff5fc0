import argparse
import logging
import sys
from pathlib import Path
from uuid import UUID

from waypoint.app_shell.context import ServiceContext
from waypoint.components.redirects import (
    CreateRedirectInput,
    DeleteAllRedirectsInput,
    DeleteRedirectInput,
    ListRedirectsInput,
    RedirectRecord,
    RedirectValidationError,
    ResolveRedirectInput,
    UpdateRedirectInput,
    ValidateRedirectInput,
    run_create,
    run_delete,
    run_delete_all,
    run_list,
    run_resolve,
    run_update,
    run_validate,
)
from waypoint.components.sitemap import GetSitemapInput, run_get_sitemap
from waypoint.rules.loader import load_rules

logger = logging.getLogger("waypoint.cli")

DB_PATH = "waypoint.db"
RULES_PATH = "rules.yaml"


def get_context(args: argparse.Namespace) -> ServiceContext:
    rules_path = Path(args.rules)
    if not rules_path.exists():
        logger.error("Rules file %s not found.", rules_path)
        sys.exit(1)

    rules = load_rules(rules_path)
    return ServiceContext.create(args.db, rules)


def _print_errors(errors: list[RedirectValidationError]) -> None:
    for e in errors:
        level = "warning" if e.warning else "error"
        print(f"{level}: {e.code}: {e.message}")


def handle_list(ctx: ServiceContext, args: argparse.Namespace) -> int:
    out = run_list(ListRedirectsInput(), **ctx.redirect_ports())
    redirects = sorted(out.redirects, key=lambda r: (r.site_name, r.old_url))
    for r in redirects:
        if args.site and r.site_name != args.site:
            continue
        kind = "301" if r.is_permanent else "302"
        print(f"{r.id}\t{r.site_name}\t{r.old_url}\t{r.new_url}\t{kind}")
    return 0


def handle_validate(ctx: ServiceContext, args: argparse.Namespace) -> int:
    candidate = RedirectRecord(
        id=args.id,
        site_name=args.site,
        old_url=args.old_url,
        new_url=args.new_url,
    )
    out = run_validate(
        ValidateRedirectInput(candidate=candidate, check_target=args.check_target),
        **ctx.redirect_ports(),
    )
    _print_errors(out.errors)
    if out.probe is not None:
        print(f"probe: {out.probe.url} -> {out.probe.status_code} {out.probe.message}")
    if out.success:
        print("OK")
    return 0 if out.success else 1


def handle_add(ctx: ServiceContext, args: argparse.Namespace) -> int:
    if not args.skip_validation:
        candidate = RedirectRecord(site_name=args.site, old_url=args.old_url, new_url=args.new_url)
        check = run_validate(
            ValidateRedirectInput(candidate=candidate, check_target=args.check_target),
            **ctx.redirect_ports(),
        )
        _print_errors(check.errors)
        if not check.success:
            return 1

    out = run_create(
        CreateRedirectInput(
            site_name=args.site,
            old_url=args.old_url,
            new_url=args.new_url,
            is_permanent=not args.temporary,
        ),
        **ctx.redirect_ports(),
    )
    if not out.success:
        _print_errors(out.errors)
        return 1

    ctx.sync_index()
    print(out.redirect_id)
    return 0


def handle_update(ctx: ServiceContext, args: argparse.Namespace) -> int:
    out = run_update(
        UpdateRedirectInput(
            redirect_id=args.id,
            site_name=args.site,
            old_url=args.old_url,
            new_url=args.new_url,
            is_permanent=not args.temporary,
        ),
        **ctx.redirect_ports(),
    )
    if not out.success:
        _print_errors(out.errors)
        return 1

    ctx.sync_index()
    return 0


def handle_delete(ctx: ServiceContext, args: argparse.Namespace) -> int:
    run_delete(DeleteRedirectInput(redirect_id=args.id), **ctx.redirect_ports())
    ctx.sync_index()
    return 0


def handle_clear(ctx: ServiceContext, args: argparse.Namespace) -> int:
    run_delete_all(DeleteAllRedirectsInput(), **ctx.redirect_ports())
    ctx.sync_index()
    return 0


def handle_resolve(ctx: ServiceContext, args: argparse.Namespace) -> int:
    site = ctx.site_directory.resolve(args.site)
    if site is None:
        logger.error("Unknown site %s.", args.site)
        return 1

    out = run_resolve(
        ResolveRedirectInput(site=site, request_url=args.url), **ctx.redirect_ports()
    )
    if not out.success:
        _print_errors(out.errors)
        return 1
    if out.new_url is None:
        print("No redirect.")
        return 1

    print(f"{out.status_code} {out.new_url}")
    return 0


def handle_reindex(ctx: ServiceContext, args: argparse.Namespace) -> int:
    if args.rebuild:
        count = ctx.index.rebuild(ctx.store)
        print(f"Indexed {count} documents.")
    else:
        count = ctx.sync_index()
        print(f"Applied {count} changes.")
    return 0


def handle_sitemap(ctx: ServiceContext, args: argparse.Namespace) -> int:
    site = ctx.site_directory.resolve(args.site)
    if site is None:
        logger.error("Unknown site %s.", args.site)
        return 1

    out = run_get_sitemap(
        GetSitemapInput(site=site, force_regenerate=args.force), repository=ctx.sitemaps
    )
    if not out.success:
        for e in out.errors:
            print(f"error: {e.code}: {e.message}")
        return 1

    print(out.xml, end="")
    return 0


HANDLERS = {
    "list": handle_list,
    "add": handle_add,
    "update": handle_update,
    "delete": handle_delete,
    "clear": handle_clear,
    "validate": handle_validate,
    "resolve": handle_resolve,
    "reindex": handle_reindex,
    "sitemap": handle_sitemap,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="waypoint", description="Redirect and sitemap tooling")
    parser.add_argument("--rules", default=RULES_PATH, help="Path to rules.yaml")
    parser.add_argument("--db", default=DB_PATH, help="Path to the SQLite database")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # list
    list_parser = subparsers.add_parser("list", help="List redirects")
    list_parser.add_argument("--site", help="Only show redirects for this site")

    # add
    add_parser = subparsers.add_parser("add", help="Add a redirect")
    add_parser.add_argument("site")
    add_parser.add_argument("old_url")
    add_parser.add_argument("new_url")
    add_parser.add_argument("--temporary", action="store_true", help="Use 302 instead of 301")
    add_parser.add_argument("--skip-validation", action="store_true")
    add_parser.add_argument("--check-target", action="store_true", help="Request the new URL")

    # update
    update_parser = subparsers.add_parser("update", help="Replace a redirect's fields")
    update_parser.add_argument("id", type=UUID)
    update_parser.add_argument("site")
    update_parser.add_argument("old_url")
    update_parser.add_argument("new_url")
    update_parser.add_argument("--temporary", action="store_true")

    # delete
    delete_parser = subparsers.add_parser("delete", help="Delete a redirect")
    delete_parser.add_argument("id", type=UUID)

    # clear
    subparsers.add_parser("clear", help="Delete every redirect")

    # validate
    validate_parser = subparsers.add_parser("validate", help="Check a candidate redirect")
    validate_parser.add_argument("site")
    validate_parser.add_argument("old_url")
    validate_parser.add_argument("new_url")
    validate_parser.add_argument("--id", type=UUID, help="ID of the redirect being edited")
    validate_parser.add_argument("--check-target", action="store_true")

    # resolve
    resolve_parser = subparsers.add_parser("resolve", help="Look up a request URL")
    resolve_parser.add_argument("site")
    resolve_parser.add_argument("url")

    # reindex
    reindex_parser = subparsers.add_parser("reindex", help="Bring the search index up to date")
    reindex_parser.add_argument("--rebuild", action="store_true", help="Re-index everything")

    # sitemap
    sitemap_parser = subparsers.add_parser("sitemap", help="Print a site's sitemap.xml")
    sitemap_parser.add_argument("site")
    sitemap_parser.add_argument("--force", action="store_true", help="Bypass the cache")

    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)

    args = build_parser().parse_args(argv)
    ctx = get_context(args)
    try:
        if args.command != "reindex":
            ctx.sync_index()
        return HANDLERS[args.command](ctx, args)
    finally:
        ctx.link_prober.close()


if __name__ == "__main__":
    sys.exit(main())
