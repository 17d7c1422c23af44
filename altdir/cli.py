#!/usr/bin/env python3
"""altdir CLI: search the alternatives directory and maintain its catalog."""

import sys
import logging
import argparse


def _session(args):
    from . import aliases
    from . import catalog
    from .search import SearchSession

    snapshot = catalog.load_snapshot(args.services)
    return SearchSession(snapshot, aliases.default_table())


def cmd_search(args):
    """Search active alternatives, optionally within one category."""
    from .display import format_card

    session = _session(args)
    query = " ".join(args.query)
    session.set_free_text(query)
    session.set_selected_category(args.category)
    results = session.get_results()
    total = session.get_category_counts().total

    label = f"'{query}'" if query else "all alternatives"
    if args.category:
        label += f" in {args.category}"
    if not results:
        print(f"No results found for {label}.")
        print("Try a different search term or category.")
    else:
        print(f"-- Results for {label}:\n")
        for item in results:
            print("\n".join(format_card(item)))
            print()
    print(f"Showing {len(results)} of {total} verified alternatives")


def cmd_categories(args):
    """Show active-entry counts per category."""
    from .display import category_icon

    counts = _session(args).get_category_counts()
    print("-- Categories:\n")
    print(f"  All ({counts.total})")
    for name, count in counts.by_category.items():
        print(f"  [{category_icon(name)}] {name} ({count})")
    print()


def cmd_suggest(args):
    """Print a pre-filled mailto: link for suggesting an alternative."""
    from .config import SUGGEST_EMAIL
    from .models import Suggestion

    suggestion = Suggestion(name=args.name, url=args.url, category=args.category,
                            description=args.description or "")
    print(suggestion.mailto_url(args.to or SUGGEST_EMAIL))


def cmd_validate(args):
    """Ping every service URL and update health status."""
    from . import validators

    summary = validators.validate_services(args.services)
    print(f"Checked {summary['checked']} sites. {summary['active']} Active, {summary['dead']} Dead")
    if summary["dead_entries"]:
        print("\nDead/Unreachable sites:")
        for name, url in summary["dead_entries"]:
            print(f"  - {name}: {url}")


def cmd_verify_trust(args):
    """Check Trustpilot presence for every service."""
    from . import validators

    summary = validators.verify_legitimacy(args.services)
    print(f"Checked {summary['checked']} services.")
    print(f"Verified: {summary['verified']}, Unverified: {summary['unverified']}")


def cmd_validate_all(args):
    """Website + Trustpilot + Wikidata validation."""
    from . import validators

    summary = validators.global_validate(args.services)
    print(f"+ Validated {summary['validated']} services")


def cmd_import_wikidata(args):
    """Replace the catalog with software imported from Wikidata."""
    from . import importer

    data = importer.import_wikidata(args.services)
    total = sum(len(c["innovators"]) for c in data)
    print(f"+ Imported {total} innovators in {len(data)} categories:\n")
    for category in data:
        print(f"  - {category['category']}: {len(category['innovators'])} innovators")


def cmd_seed(args):
    """Inject the bundled seed entries."""
    from . import importer

    added = importer.seed_catalog(args.services)
    print(f"+ Data injected successfully ({added} new entries).")


def build_parser():
    parser = argparse.ArgumentParser(prog="altdir", description="Directory of alternative digital services")
    parser.add_argument("--services", default=None, metavar="PATH",
                        help="Path to services.json (default: $SERVICES_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # search
    search_parser = subparsers.add_parser("search", help="Search alternatives")
    search_parser.add_argument("query", nargs="*")
    search_parser.add_argument("-c", "--category", default=None, help="Restrict to one category")

    subparsers.add_parser("categories", help="Show categories with active counts")

    # suggest
    suggest_parser = subparsers.add_parser("suggest", help="Build a suggestion email link")
    suggest_parser.add_argument("--name", required=True)
    suggest_parser.add_argument("--url", required=True)
    suggest_parser.add_argument("--category", required=True)
    suggest_parser.add_argument("--description", default="")
    suggest_parser.add_argument("--to", default=None, help="Recipient (default: $SUGGEST_EMAIL)")

    # maintenance
    subparsers.add_parser("validate", help="Check every URL and update health status")
    subparsers.add_parser("verify-trust", help="Check Trustpilot presence")
    subparsers.add_parser("validate-all", help="Website + Trustpilot + Wikidata validation")
    subparsers.add_parser("import-wikidata", help="Replace the catalog with a Wikidata import")
    subparsers.add_parser("seed", help="Inject bundled seed entries")
    return parser


def main(argv=None):
    from .aliases import AliasConflictError
    from .config import LOG_LEVEL
    from .importer import WikidataError
    from .models import CatalogError

    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    handlers = {
        "search": cmd_search,
        "categories": cmd_categories,
        "suggest": cmd_suggest,
        "validate": cmd_validate,
        "verify-trust": cmd_verify_trust,
        "validate-all": cmd_validate_all,
        "import-wikidata": cmd_import_wikidata,
        "seed": cmd_seed,
    }
    try:
        handlers[args.command](args)
    except (CatalogError, AliasConflictError, WikidataError) as e:
        print(f"  x {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
