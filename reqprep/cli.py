"""reqprep CLI - preview fully resolved HTTP requests."""

import logging
import sys

import click
import requests

TOOL_HELP = """\
reqprep — Resolve templated HTTP requests against an environment.

Prints the request exactly as it would be sent: URL, query params,
headers (including those implied by auth and body settings) and body,
with every {{variable}} substituted. Nothing is sent over the network.

\b
USAGE
─────
  reqprep REQUEST [-e ENV] [options]

  REQUEST is a YAML file path, or a name looked up in the requests
  directory (REQUEST.yaml / REQUEST.yml).

  reqprep requests/get-user.yaml -e staging
  reqprep get-user -e staging -v id=42
  reqprep create-user --curl

\b
VARIABLE PRECEDENCE
───────────────────
  Endpoint URL only:
  \b
  0. vars: in the request file   (local to the request)

  Everywhere:
  \b
  1. -v key=value                (CLI flag)
  2. variables: in the environment file (-e)
  3. .env file (--env-file or defaults.env_file)
  4. -g key=value and defaults.globals (global scope)

\b
REQUEST FILE FORMAT (requests/*.yaml)
─────────────────────────────────────
  \b
  name: get-user                  # optional, defaults to filename
  method: GET
  endpoint: "{{base_url}}/users/{{id}}"
  vars:
    - {key: id, value: "1"}
  headers:
    - {key: Accept, value: application/json}
    - {key: X-Debug, value: "1", active: false}
  params:
    - {key: expand, value: profile}
  auth:
    type: bearer                  # none | basic | bearer | oauth-2 | api-key
    token: "{{token}}"
  body:
    content_type: application/json
    body: '{"name": "{{name}}"}'

  Form bodies:
  \b
  body:
    content_type: application/x-www-form-urlencoded
    body: |
      user={{user}}
      #disabled=1

  body:
    content_type: multipart/form-data
    body:
      - {key: title, value: "{{title}}"}
      - {key: attachment, files: [report.pdf]}

\b
ENVIRONMENT FILE FORMAT (environments/*.yaml)
─────────────────────────────────────────────
  \b
  name: staging
  variables:
    base_url: https://staging.example.com
    token: abc123

\b
CONFIG FILE FORMAT (.reqprep.yaml)
──────────────────────────────────
  Config resolution order:
    1. -c/--config flag (explicit path)
    2. .reqprep.yaml / .reqprep.yml / reqprep.yaml / reqprep.yml in CWD
    3. ~/.reqprep/config.yaml (global)

  \b
  defaults:
    environment: staging          # used when -e is not given
    env_file: .env
    requests_dir: requests
    environments_dir: environments
    globals:
      user_agent: reqprep

\b
OUTPUT
──────
  Default output is a readable summary. --json prints the resolved
  request as JSON, --curl prints an equivalent curl command.
"""


@click.command(
    cls=click.Command,
    help=TOOL_HELP,
    context_settings={"max_content_width": 88},
)
@click.argument("request_name", required=False)
@click.option(
    "-e",
    "--env",
    "env_name",
    default=None,
    help="Environment name or path. Default: defaults.environment from config.",
)
@click.option(
    "--env-file",
    "env_file",
    default=None,
    help=".env file whose entries are added to the environment.",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    default=None,
    help="Config file path. Default: .reqprep.yaml in CWD, then ~/.reqprep/config.yaml.",
)
@click.option(
    "--requests-dir",
    "requests_dir_override",
    default=None,
    help="Override requests directory.",
)
@click.option(
    "--environments-dir",
    "environments_dir_override",
    default=None,
    help="Override environments directory.",
)
@click.option(
    "-v",
    "--var",
    multiple=True,
    help="Environment variable as key=value. Wins over the environment file. Repeatable.",
)
@click.option(
    "-g",
    "--global",
    "global_var",
    multiple=True,
    help="Global variable as key=value. Lowest precedence. Repeatable.",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON.")
@click.option("--curl", "as_curl", is_flag=True, default=False, help="Output a curl command.")
@click.option(
    "--list-requests",
    "show_list_requests",
    is_flag=True,
    default=False,
    help="List request files in the requests directory.",
)
@click.option("--debug", is_flag=True, default=False, help="Log resolution details to stderr.")
def main(
    request_name,
    env_name,
    env_file,
    config_file,
    requests_dir_override,
    environments_dir_override,
    var,
    global_var,
    as_json,
    as_curl,
    show_list_requests,
    debug,
):
    """Resolve a request file against an environment and print it."""
    from reqprep.core import (
        config_globals,
        find_resource_file,
        list_resources,
        load_config,
        load_env_file,
        load_environment,
        load_request,
        parse_var_specs,
        resolve_config_path,
        resource_search_paths,
    )
    from reqprep.effective import get_effective_request
    from reqprep.errors import ReqprepError
    from reqprep.models import Environment
    from reqprep.output import format_effective
    from reqprep.prepare import format_curl
    from reqprep.scope import GLOBAL_VARIABLES

    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    if as_json and as_curl:
        click.echo("ERROR: --json and --curl are mutually exclusive.", err=True)
        sys.exit(1)

    try:
        config = load_config(resolve_config_path(config_file))
    except ReqprepError as e:
        _fail(e)
    defaults = config.get("defaults", {})

    if show_list_requests:
        _cmd_list_requests(list_resources, config, requests_dir_override)
        return

    if not request_name:
        ctx = click.get_current_context()
        click.echo(ctx.get_help())
        ctx.exit(1)

    request_path = find_resource_file("requests", request_name, config, requests_dir_override)
    if request_path is None:
        _not_found(
            "Request",
            request_name,
            resource_search_paths("requests", request_name, config, requests_dir_override),
        )

    env_name = env_name or defaults.get("environment")
    env_path = None
    if env_name:
        env_path = find_resource_file("environments", env_name, config, environments_dir_override)
        if env_path is None:
            _not_found(
                "Environment",
                env_name,
                resource_search_paths("environments", env_name, config, environments_dir_override),
            )

    try:
        request = load_request(request_path)
        environment = load_environment(env_path) if env_path else Environment()

        if env_file:
            dotenv_vars = load_env_file(env_file)
        else:
            dotenv_vars = load_env_file(defaults.get("env_file"), config.get("_config_dir") or ".")

        environment = Environment(
            name=environment.name,
            variables=(*parse_var_specs(var), *environment.variables, *dotenv_vars),
        )

        GLOBAL_VARIABLES.update(config_globals(config))
        GLOBAL_VARIABLES.update(parse_var_specs(global_var))

        effective = get_effective_request(request, environment)
    except ReqprepError as e:
        _fail(e)

    if as_curl:
        try:
            click.echo(format_curl(effective))
        except requests.exceptions.RequestException as e:
            _fail(f"Cannot build curl command: {e}")
        return

    click.echo(format_effective(effective, as_json=as_json))


# ── Subcommand implementations ──────────────────────────────────────────


def _fail(message):
    click.echo(f"ERROR: {message}", err=True)
    sys.exit(1)


def _not_found(kind, name, searched):
    click.echo(
        f"{kind} '{name}' not found.\nSearched:\n" + "\n".join(f"  - {p}" for p in searched),
        err=True,
    )
    sys.exit(1)


def _cmd_list_requests(list_resources_fn, config, requests_dir_override=None):
    rdir, files = list_resources_fn("requests", config, requests_dir_override)
    if not files:
        if rdir:
            click.echo(f"No requests found in: {rdir}")
        else:
            click.echo("No requests directory found.")
            click.echo("Searched: ./requests/, ~/.reqprep/requests/")
        return

    click.echo(f"Requests from: {rdir}")
    click.echo(f"{len(files)} available:\n")
    for f in files:
        click.echo(f"  {f.stem}")
