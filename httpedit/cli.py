"""httpedit CLI - edit and replay requests saved in .http documents."""

import sys
from pathlib import Path

import click

TOOL_HELP = """\
httpedit: replay and maintain requests saved in .http documents.

\b
DOCUMENT FORMAT
───────────────
  \b
  @host = https://api.example.com
  @token = "abc123"

  \b
  ### Get users
  GET {{host}}/users?page=1
  Authorization: Bearer {{token}}

  \b
  ### Create user
  POST {{host}}/users
  Content-Type: application/json

  \b
  {"name": "test"}

  @name = value lines declare document-wide variables. {{name}}
  placeholders are substituted only when a request is sent; the saved
  document keeps them as written.

\b
USAGE
─────
  httpedit api.http                     Send the first request
  httpedit api.http -r "Get users"      Send a request by name
  httpedit api.http -r 2                Send a request by index
  httpedit api.http --list              List requests
  httpedit api.http --variables -r 0    Variables and their usage
  httpedit api.http -r 0 --export-curl  Print a curl command
  httpedit api.http --import "curl ..." Append an imported request
  httpedit api.http --import @coll.json Import a Postman collection
  httpedit api.http --format            Re-save in canonical form

\b
PRE-AUTH
────────
  A request titled "### @PRE-AUTH" is the login step. Before any other
  request is sent it is executed and the value found at its response path
  is exposed as {{auth}} for that send only:

  \b
  ### @PRE-AUTH
  # @responsePath data.token
  POST {{host}}/login
  Content-Type: application/json

  \b
  {"username": "", "password": ""}

  Credential values (email, login, username, user, password, pass) are
  blanked whenever the document is saved. At send time they are filled from
  the username/password variables (config user, -v flags).

\b
CONFIG (.httpedit.yaml)
───────────────────────
  Resolution: -c flag, then .httpedit.yaml / .httpedit.yml / httpedit.yaml /
  httpedit.yml in CWD, then ~/.httpedit/config.yaml.

  \b
  defaults:
    timeout: 30
    env_file: .env
    environment: local
    user: admin
  environments:
    - name: local
      variables: {host: "http://localhost:3000"}
  users:
    - name: admin
      username: admin@example.com
      password: ${ADMIN_PASSWORD}

\b
VARIABLE PRECEDENCE
───────────────────
  1. {{auth}} from pre-auth   (highest)
  2. -v key=value
  3. config user, then config environment
  4. @name = value in the document (lowest)
"""


@click.command(
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("file", required=False, type=click.Path(dir_okay=False))
@click.option(
    "-r",
    "--request",
    "selector",
    default=None,
    metavar="NAME|INDEX",
    help="Request to act on. Default: first request that is not @PRE-AUTH.",
)
@click.option("--list", "show_list", is_flag=True, default=False, help="List requests in FILE.")
@click.option(
    "--variables",
    "show_variables",
    is_flag=True,
    default=False,
    help="List document variables and how often the selected request uses them.",
)
@click.option(
    "--export-curl",
    "export_curl",
    is_flag=True,
    default=False,
    help="Print the selected request as a curl command.",
)
@click.option(
    "--dialect",
    type=click.Choice(["posix", "windows"]),
    default=None,
    help="Quoting style for --export-curl. Default: by platform.",
)
@click.option(
    "--import",
    "import_source",
    default=None,
    metavar="SOURCE",
    help="Curl command or Postman collection to append to FILE. "
    "Literal text, @path to read a file, or - for stdin.",
)
@click.option(
    "--format",
    "do_format",
    is_flag=True,
    default=False,
    help="Parse and re-save FILE in canonical form (redacts @PRE-AUTH credentials).",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: .httpedit.yaml in CWD, then ~/.httpedit/config.yaml.",
)
@click.option("-e", "--env", "environment", default=None, help="Config environment name.")
@click.option("-u", "--user", default=None, help="Config user name.")
@click.option(
    "-v",
    "--var",
    multiple=True,
    help="Variable as key=value. Overrides document and config values. Repeatable.",
)
@click.option("--timeout", type=int, default=None, help="Request timeout in seconds. Default: 30.")
@click.option(
    "--no-pre-auth",
    "no_pre_auth",
    is_flag=True,
    default=False,
    help="Do not run the @PRE-AUTH request before sending.",
)
@click.option("--verbose", is_flag=True, default=False, help="Include response headers in output.")
@click.option("--raw", is_flag=True, default=False, help="Output the response body only.")
@click.option(
    "--init",
    "do_init",
    is_flag=True,
    default=False,
    help="Scaffold .httpedit.yaml in CWD.",
)
@click.option("--debug", is_flag=True, default=False, help="Log debug output to stderr.")
def main(
    file,
    selector,
    show_list,
    show_variables,
    export_curl,
    dialect,
    import_source,
    do_format,
    config_file,
    environment,
    user,
    var,
    timeout,
    no_pre_auth,
    verbose,
    raw,
    do_init,
    debug,
):
    """Send, list, export and import requests in a .http document."""
    from httpedit.log import setup_logging

    setup_logging("DEBUG" if debug else "WARNING")

    if do_init:
        _cmd_init()
        return

    if not file:
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        ctx.exit(1)

    path = Path(file)

    if import_source:
        _cmd_import(path, import_source)
        return

    if not path.exists():
        click.echo(f"ERROR: File not found: {path}", err=True)
        sys.exit(1)

    doc = _load_document(path)

    if show_list:
        _cmd_list(doc)
        return

    if do_format:
        _cmd_format(path, doc)
        return

    request = _select_request(doc, selector)

    if show_variables:
        _cmd_variables(doc, request)
        return

    if export_curl:
        _cmd_export_curl(request, dialect)
        return

    # Parse -v key=value pairs
    cli_vars = {}
    for v_str in var:
        if "=" in v_str:
            k, val = v_str.split("=", 1)
            cli_vars[k.strip()] = val.strip()

    _cmd_send(
        doc,
        request,
        config_file,
        environment,
        user,
        cli_vars,
        timeout,
        no_pre_auth,
        verbose,
        raw,
    )


# ── Subcommand implementations ──────────────────────────────────────────


def _cmd_list(doc):
    click.echo(f"{len(doc.requests)} request(s):\n")
    for i, req in enumerate(doc.requests):
        marker = "*" if req.is_bootstrap else " "
        click.echo(f" {marker}[{i}] {req.method:<7} {req.name}")
        click.echo(f"       {req.full_url}")
    if doc.variables:
        click.echo(f"\nVariables: {', '.join(doc.variables)}")


def _cmd_variables(doc, request):
    from httpedit.templating import count_usages

    if not doc.variables:
        click.echo("No variables declared.")
        return
    click.echo(f"Variables (usage in '{request.name}'):\n")
    for name, value in doc.variables.items():
        count = count_usages(request, name)
        usage = f"used {count}" if count else "unused"
        click.echo(f"  @{name} = {value}  ({usage})")


def _cmd_export_curl(request, dialect):
    from httpedit.curl import POSIX, WINDOWS, build_curl

    if dialect is None:
        dialect = WINDOWS if sys.platform == "win32" else POSIX
    click.echo(build_curl(request, dialect=dialect))


def _cmd_format(path, doc):
    from httpedit.document import serialize_document
    from httpedit.redaction import has_credentials

    for req in doc.requests:
        if req.is_bootstrap and has_credentials(req.body):
            click.echo("Removed credential values from @PRE-AUTH body.", err=True)
    path.write_text(serialize_document(doc), encoding="utf-8")
    click.echo(f"Formatted {path} ({len(doc.requests)} request(s))")


def _cmd_import(path, source):
    from httpedit.document import DocumentParser, serialize_document
    from httpedit.importer import UnsupportedImportFormat, parse_import
    from httpedit.models import Document

    content = _read_source(source)
    try:
        imported = parse_import(content)
    except UnsupportedImportFormat as e:
        click.echo(f"ERROR: Import failed: {e}", err=True)
        sys.exit(1)

    if not imported:
        click.echo("Nothing to import.", err=True)
        return

    text = path.read_text(encoding="utf-8") if path.exists() else ""
    parser = DocumentParser().feed(text)
    doc = parser.finish()
    if not parser.requests:
        # Only the placeholder request; keep the variables, drop the placeholder
        doc = Document(variables=doc.variables)
    for req in imported:
        doc.add(req)
    path.write_text(serialize_document(doc), encoding="utf-8")
    click.echo(f"Imported {len(imported)} request(s) into {path}")


def _cmd_send(
    doc,
    request,
    config_file,
    environment,
    user,
    cli_vars,
    timeout,
    no_pre_auth,
    verbose,
    raw,
):
    from httpedit.core import get_merged_variables, load_config, load_env, resolve_config_path
    from httpedit.executor import execute_request
    from httpedit.preauth import TOKEN_VARIABLE, PreAuthError, execute_pre_auth
    from httpedit.response import format_response
    from httpedit.templating import resolve_request

    config = load_config(resolve_config_path(config_file))
    defaults = config.get("defaults", {})
    env = load_env(defaults.get("env_file"), config.get("_config_dir"))

    variables = dict(doc.variables)
    variables.update(get_merged_variables(config, environment, user, env))
    variables.update(cli_vars)

    timeout = _resolve_timeout(timeout, defaults.get("timeout"))
    verify = defaults.get("verify_ssl", True)

    pre_auth = doc.pre_auth
    if pre_auth and pre_auth.enabled and not no_pre_auth and not request.is_bootstrap:
        try:
            token = execute_pre_auth(
                pre_auth,
                variables,
                send=execute_request,
                timeout=timeout,
                verify=verify,
            )
        except PreAuthError as e:
            click.echo(
                f"ERROR: Pre-authentication failed: {e} (use --no-pre-auth to skip)",
                err=True,
            )
            sys.exit(1)
        variables[TOKEN_VARIABLE] = token
        click.echo("[pre-auth] token captured", err=True)

    resolved = resolve_request(request, variables)
    if not resolved.url.startswith(("http://", "https://")):
        click.echo(
            f"ERROR: Please enter a valid URL starting with http:// or https:// (got '{resolved.url}')",
            err=True,
        )
        sys.exit(1)

    response = execute_request(resolved, timeout=timeout, verify=verify)
    if response.error:
        click.echo(f"ERROR: {response.error}", err=True)
        sys.exit(1)
    click.echo(format_response(response, verbose=verbose, raw=raw))


def _cmd_init():
    """Scaffold .httpedit.yaml in CWD."""
    from httpedit.core import CONFIG_FILE_NAME, generate_config

    config_file = Path(CONFIG_FILE_NAME)
    if config_file.exists():
        click.echo(f"  {config_file} (skipped, already exists)")
        return
    config_file.write_text(generate_config())
    click.echo(f"  {config_file} (created)")


# ── Helpers ──────────────────────────────────────────────────────────────


def _load_document(path):
    """Parse FILE and hydrate the live pre-auth config from its @PRE-AUTH request."""
    from httpedit.document import parse_document
    from httpedit.preauth import hydrate_pre_auth

    doc = parse_document(path.read_text(encoding="utf-8"))
    doc.pre_auth = hydrate_pre_auth(doc.requests)
    return doc


def _select_request(doc, selector):
    if selector is not None:
        request = doc.find(selector)
        if request is None:
            click.echo(f"ERROR: No request matching '{selector}'. Use --list.", err=True)
            sys.exit(1)
        return request
    for req in doc.requests:
        if not req.is_bootstrap:
            return req
    return doc.requests[0]


def _read_source(source):
    if source == "-":
        return click.get_text_stream("stdin").read()
    if source.startswith("@"):
        src = Path(source[1:])
        if not src.exists():
            click.echo(f"ERROR: File not found: {src}", err=True)
            sys.exit(1)
        return src.read_text(encoding="utf-8")
    return source


def _resolve_timeout(*sources, default=30):
    """Return the first truthy timeout from sources, or default."""
    for t in sources:
        if t:
            return t
    return default
