#!/usr/bin/env python3

import os
import sys
import asyncio
import getpass
import argparse
import logging.config
from typing import Callable, Dict, List, Optional

import uvicorn
import pydantic
import pymongo.errors

from chillgamer_core import settings as _settings
from chillgamer_core.api.api import create_app
from chillgamer_core.persistence import database
from chillgamer_core.schemas import config


SYSTEMD_UNIT_TEMPLATE = """[Unit]
Description=ChillGamer core REST API server
After=network-online.target
Wants=network-online.target

[Service]
Type=simple
ExecStart={python} -m chillgamer_core run
Environment=CONFIG_PATH={config}
User={user}
WorkingDirectory={directory}
Restart=on-failure
SyslogIdentifier=chillgamer_core

[Install]
WantedBy=multi-user.target
"""


def get_parser(program: str) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=program, description="ChillGamer core REST API management")
    commands = parser.add_subparsers(
        description="Available sub-commands: init, run, ping, systemd",
        dest="command",
        required=True,
        metavar="<command>",
        help="the sub-command to be executed"
    )

    init = commands.add_parser("init", description="Create the config file of the project")
    init.add_argument(
        "--database",
        metavar="url",
        help="MongoDB connection string including scheme and credentials (default: env 'MONGODB_URI')"
    )
    init.add_argument("--port", type=int, metavar="port", help="TCP port the server should listen on")
    init.add_argument("--force", action="store_true", help="Overwrite an existing config file")

    run = commands.add_parser("run", description="Serve the ChillGamer core REST API using uvicorn")
    ping = commands.add_parser("ping", description="Check that the configured MongoDB deployment is reachable")
    for sub_parser in (run, ping):
        sub_parser.add_argument("--config", metavar="path", help="Use this config file instead of 'config.json'")

    run.add_argument("--host", metavar="host", help="Listen on this host instead of the configured one")
    run.add_argument("--port", type=int, metavar="port", help="Listen on this port instead of the configured one")
    run.add_argument("--no-access-log", action="store_true", help="Don't write access logs")
    run.add_argument("--root-path", default="", metavar="path", help="Serve the API below this path prefix")

    systemd = commands.add_parser("systemd", description="Write a systemd unit file to run the API as service")
    systemd.add_argument("--force", action="store_true", help="Overwrite an existing unit file")
    systemd.add_argument(
        "--path",
        default=os.path.join(os.path.abspath("."), "chillgamer_core.service"),
        metavar="path",
        help="Target path of the unit file"
    )

    return parser


def _load_settings(config_path: Optional[str]) -> Optional[_settings.Settings]:
    if config_path:
        _settings.CONFIG_PATHS = [config_path]
    try:
        return _settings.Settings()
    except (pydantic.ValidationError, ValueError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return None


def init_project(args: argparse.Namespace) -> int:
    path = os.path.abspath(_settings.CONFIG_PATHS[0])
    if os.path.exists(path) and not args.force:
        print(f"File {path!r} already exists. Use '--force' to overwrite it.", file=sys.stderr)
        return 1

    conf = _settings.get_default_core_config(_settings.get_db_from_env(args.database))
    if args.port is not None:
        try:
            conf.server = config.ServerConfig(**{**conf.server.model_dump(), "port": args.port})
        except pydantic.ValidationError:
            print(f"Invalid port {args.port}!", file=sys.stderr)
            return 1

    _settings.SETTINGS_LOG_INFO_FUNCTION = print
    _settings.store_configuration(conf, path)
    return 0


def run_server(args: argparse.Namespace) -> int:
    settings = _load_settings(args.config)
    if settings is None:
        return 1

    log_config = settings.logging.model_dump()
    logging.config.dictConfig(log_config)

    host = args.host or settings.server.host
    port = args.port or settings.server.port
    app = create_app(settings=settings, configure_logging=False)
    logging.getLogger("chillgamer_core").info(f"Serving the API on host {host} port {port}")
    uvicorn.run(
        app,
        host=host,
        port=port,
        reload=False,
        workers=1,
        log_config=log_config,
        access_log=not args.no_access_log,
        proxy_headers=True,
        root_path=args.root_path
    )
    return 0


def ping_database(args: argparse.Namespace) -> int:
    settings = _load_settings(args.config)
    if settings is None:
        return 1

    store = database.init(settings.database)
    try:
        asyncio.run(store.ping())
    except pymongo.errors.PyMongoError as exc:
        print(f"Failed to reach the database {settings.database.name!r}: {exc}", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(f"Successfully connected to the database {settings.database.name!r}.")
    return 0


def handle_systemd(args: argparse.Namespace) -> int:
    if os.path.exists(args.path) and not args.force:
        print(f"File {args.path!r} already exists. Use '--force' to overwrite it.", file=sys.stderr)
        return 1

    python = sys.executable
    if not python:
        python = "python3"
        print("The Python interpreter couldn't be determined, check 'ExecStart' in the unit file.", file=sys.stderr)

    with open(args.path, "w") as f:
        f.write(SYSTEMD_UNIT_TEMPLATE.format(
            python=python,
            config=os.path.abspath(_settings.CONFIG_PATHS[0]),
            user=getpass.getuser(),
            directory=os.path.abspath(".")
        ))

    print(
        f"Created the unit file {args.path!r}. Link it into /etc/systemd/system/, "
        f"run 'systemctl daemon-reload' and enable the new service afterwards."
    )
    return 0


COMMANDS: Dict[str, Callable[[argparse.Namespace], int]] = {
    "init": init_project,
    "run": run_server,
    "ping": ping_database,
    "systemd": handle_systemd
}


def main(argv: Optional[List[str]] = None, program: str = "chillgamer_core") -> int:
    namespace = get_parser(program).parse_args(argv)
    return COMMANDS[namespace.command](namespace)


if __name__ == '__main__':
    program_name = sys.argv[0] if not sys.argv[0].endswith("__main__.py") else "chillgamer_core"
    sys.exit(main(sys.argv[1:], program_name))
