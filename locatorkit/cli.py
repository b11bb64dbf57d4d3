# locatorkit/cli.py
from __future__ import annotations

"""Command-line interface
------------------------
Print the effective config, validate selector catalogs and resolve a
selector against a saved HTML page or a live browser page.
"""
import json
import sys
from pathlib import Path
from typing import List, Optional

import click

from locatorkit.selectors.errors import LocatorError
from locatorkit.selectors.loader import find_catalog_files, load_catalogs_file, to_selector
from locatorkit.selectors.locator import ElementLocator
from locatorkit.selectors.scope import QueryScope
from locatorkit.selectors.values import Selector
from locatorkit.utils.config import get_settings
from locatorkit.utils.logger import attach_file_logger, bound, detach_file_logger, get_logger, set_log_level
from locatorkit.utils.timing import measure


# -------- helpers --------


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2, ensure_ascii=False))


def _resolve_paths(paths: List[str]) -> List[Path]:
    return [Path(p).resolve() for p in paths]


def _summarize(element) -> dict:
    text = element.text or ""
    return {
        "tag": element.tag_name.lower(),
        "id": element.attribute("id"),
        "class": element.attribute("class"),
        "text": text if len(text) <= 80 else text[:77] + "...",
    }


def _selector_from_options(selector_json: Optional[str], catalog: Optional[str], name: Optional[str]) -> Selector:
    if bool(selector_json) == bool(catalog):
        raise click.UsageError("Provide exactly one of --selector or --catalog.")
    if selector_json:
        try:
            raw = json.loads(selector_json)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not valid JSON: {e}", param_hint="--selector") from e
        if not isinstance(raw, dict) or not raw:
            raise click.BadParameter("must be a non-empty JSON object", param_hint="--selector")
        return to_selector(raw)

    if not name:
        raise click.UsageError("--catalog requires --name.")
    for catalog_obj in load_catalogs_file(catalog):
        if name in catalog_obj.selectors:
            return catalog_obj.selector(name)
    raise click.BadParameter(f"no selector named {name!r} in {catalog}", param_hint="--name")


@measure("locate")
def _run_lookup(scope: QueryScope, selector: Selector, find_all: bool) -> List[dict]:
    locator = ElementLocator(scope, selector)
    if find_all:
        return [_summarize(el) for el in locator.locate_all()]
    element = locator.locate()
    return [_summarize(element)] if element is not None else []


def _lookup_in_document(source: str, selector: Selector, find_all: bool) -> List[dict]:
    from locatorkit.drivers.document import HtmlDocument

    return _run_lookup(HtmlDocument.from_file(source), selector, find_all)


def _lookup_in_browser(source: str, selector: Selector, find_all: bool) -> List[dict]:
    # local imports: Playwright is only needed for live pages
    from playwright.sync_api import sync_playwright

    from locatorkit.drivers.browser import BrowserScope

    settings = get_settings()
    url = source if source.startswith(("http://", "https://", "file://")) else Path(source).resolve().as_uri()
    with sync_playwright() as p:
        browser = getattr(p, settings.BROWSER_TYPE.value).launch(**settings.playwright_launch_kwargs())
        try:
            page = browser.new_page()
            page.goto(url, wait_until="domcontentloaded", timeout=settings.PAGE_LOAD_TIMEOUT)
            return _run_lookup(BrowserScope(page), selector, find_all)
        finally:
            browser.close()


# -------- CLI root --------


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL from settings",
)
@click.option("--log-file", type=click.Path(dir_okay=False), default=None, help="Also write JSON logs to this file")
@click.version_option(package_name="locatorkit")
@click.pass_context
def cli(ctx: click.Context, log_level: Optional[str], log_file: Optional[str]):
    _ = get_settings()
    if log_level:
        set_log_level(log_level.upper())
    if log_file:
        handler = attach_file_logger(log_file)
        ctx.call_on_close(lambda: detach_file_logger(handler))


# -------- commands --------


@cli.command("config")
def cmd_config():
    """Print effective configuration (after .env & env vars)."""
    s = get_settings()
    _echo_json(s.model_dump(mode="json"))


@cli.command("validate")
@click.argument("targets", nargs=-1, required=False)
@click.option("--dir", "catalogs_dir", type=click.Path(file_okay=False, dir_okay=True, exists=True),
              help="Validate all catalogs under this directory (defaults to SELECTORS_DIR)")
@click.option("--recursive/--no-recursive", default=True, show_default=True)
def cmd_validate(targets: List[str], catalogs_dir: Optional[str], recursive: bool):
    """Validate selector catalogs from files or a directory (supports multi-doc YAML)."""
    paths: list[Path] = []
    if targets:
        for p in _resolve_paths(targets):
            if p.is_dir():
                paths.extend(find_catalog_files(p, recursive=True))
            else:
                paths.append(p)
    else:
        root = Path(catalogs_dir) if catalogs_dir else get_settings().SELECTORS_DIR
        if not root.is_dir():
            click.echo(f"No catalog directory at {root}; provide file(s) or --dir to validate.")
            sys.exit(2)
        paths.extend(find_catalog_files(root, recursive=recursive))

    ok = True
    for fp in paths:
        try:
            for catalog in load_catalogs_file(fp):
                click.echo(f"OK  {fp}  ->  [{catalog.page}] {len(catalog.selectors)} selector(s)")
        except (OSError, ValueError) as e:
            ok = False
            click.echo(f"ERR {fp}  ->  {e}")

    sys.exit(0 if ok else 1)


@cli.command("locate")
@click.argument("source")
@click.option("--selector", "selector_json", default=None,
              help='JSON selector, e.g. \'{"tag_name": "div", "text": "/^Save$/"}\'')
@click.option("--catalog", type=click.Path(dir_okay=False, exists=True), default=None,
              help="Catalog file holding the selector")
@click.option("--name", default=None, help="Selector name inside --catalog")
@click.option("--all", "find_all", is_flag=True, help="Return every match instead of the first")
@click.option("--driver", type=click.Choice(["html", "browser"]), default="html", show_default=True,
              help="html: parse SOURCE as a static file; browser: open SOURCE (file or URL) with Playwright")
def cmd_locate(
    source: str,
    selector_json: Optional[str],
    catalog: Optional[str],
    name: Optional[str],
    find_all: bool,
    driver: str,
):
    """
    Resolve a selector against SOURCE and print the matches as JSON.

    Examples:
      locatorkit locate page.html --selector '{"tag_name": "button", "text": "/^Save/"}'
      locatorkit locate https://example.com --driver browser --catalog selectors/home.yaml --name more_info
    """
    log = get_logger(__name__)

    try:
        with bound(source=source):
            selector = _selector_from_options(selector_json, catalog, name)
            if driver == "browser":
                matches = _lookup_in_browser(source, selector, find_all)
            else:
                matches = _lookup_in_document(source, selector, find_all)
    except (TypeError, ValueError, LocatorError) as e:
        raise click.UsageError(str(e)) from e
    except FileNotFoundError as e:
        raise click.BadParameter(str(e), param_hint="SOURCE") from e

    log.debug(f"{len(matches)} match(es) for {selector!r}")
    _echo_json({"selector": repr(selector), "matches": matches})
    sys.exit(0 if matches else 1)


def main() -> None:
    cli(prog_name="locatorkit")


if __name__ == "__main__":
    main()
