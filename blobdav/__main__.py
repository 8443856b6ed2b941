"""
blobdav HTTP gateway
"""

import argparse
import asyncio
import inspect
import logging
import os
import secrets
import sys
from pathlib import Path

import uvicorn
from uvicorn.config import LOGGING_CONFIG

from blobdav.config import ENV_PREFIX, StoreBackend, get_settings, validate_settings
from blobdav.connections import open_store
from blobdav.paths import parent_key, resource_path
from blobdav.resourcetype import collection_metadata, is_collection

MASKED_SETTINGS = {"secret", "s3_secret_key"}


def run(args):
    settings = get_settings()
    logging.info(f"Starting server at port {args.port}, debug={not args.nodebug}, store={settings.store_backend.value}")
    if warning := validate_settings(settings):
        logging.warning(warning)
    logging.info(
        "To change server config, create an .env file and/or set environment parameters,\n"
        f"{' ' * 26}see blobdav/config.py for the available settings.\n"
        f"{' ' * 26}You can also run `python -m blobdav create-env` to create a .env file with a random secret\n"
    )

    log_config = "logging.yml" if Path("logging.yml").exists() else LOGGING_CONFIG
    uvicorn.run(
        "blobdav.api:create_app",
        factory=True,
        host="0.0.0.0",
        reload=not args.nodebug,
        port=int(args.port),
        log_config=log_config,
    )


def base_env(args) -> dict[str, str]:
    env = dict(blobdav_secret=args.secret or secrets.token_hex(nbytes=32))
    if args.s3_host:
        env["blobdav_store_backend"] = StoreBackend.s3.value
        env["blobdav_s3_host"] = args.s3_host
    return env


def create_env(args):
    if os.path.exists(".env"):
        print("*** File .env already exists, quitting ***")
        sys.exit(1)

    env = base_env(args)
    with open(".env", "w") as f:
        for key, val in env.items():
            f.write(f"{key}={val}\n")
    os.chmod(".env", 0o600)
    print("*** Created .env file ***")


def show_config(_args):
    settings = get_settings()
    print(f"# Settings read from environment and {settings.env_file}")
    for k, v in settings.model_dump(mode="json").items():
        if k in MASKED_SETTINGS and v:
            v = "********"
        print(f"{ENV_PREFIX.upper()}{k.upper()}={'' if v is None else v}")


async def mkcol(args):
    key = resource_path(args.path)
    if not key:
        logging.error("The root is always a collection, give a path below it")
        sys.exit(1)

    async with open_store(get_settings()) as store:
        parent = parent_key(key)
        if parent:
            info = await store.head(parent)
            if info is None or not is_collection(info.custom_metadata):
                logging.error(f"Cannot create {key}: parent {parent} is not a collection")
                sys.exit(1)
        existing = await store.head(key)
        if existing is not None:
            kind = "collection" if is_collection(existing.custom_metadata) else "blob"
            logging.error(f"Cannot create {key}: a {kind} with that key already exists")
            sys.exit(1)
        await store.put(key, b"", custom_metadata=collection_metadata())
        logging.info(f"**** Created collection /{key}/ ****")


def main():
    parser = argparse.ArgumentParser(description=__doc__, prog="python -m blobdav")

    subparsers = parser.add_subparsers(dest="action", title="action", help="Action to perform:", required=True)
    p = subparsers.add_parser("run", help="Run the gateway")
    p.add_argument(
        "--no-debug",
        action="store_true",
        dest="nodebug",
        help="Disable debug mode (no auto reload)",
    )
    p.add_argument("-p", "--port", help="Port", default=5000)
    p.set_defaults(func=run)

    p = subparsers.add_parser("create-env", help="Create the .env file with a random secret")
    p.add_argument("-s", "--secret", help="Use this secret instead of a random one")
    p.add_argument("--s3-host", help="Serve the S3 compatible object store at this url")
    p.set_defaults(func=create_env)

    p = subparsers.add_parser("config", help="Show the effective settings")
    p.set_defaults(func=show_config)

    p = subparsers.add_parser("mkcol", help="Create a collection (directory) in the configured store")
    p.add_argument("path", help="Path of the collection, e.g. /photos/2024/")
    p.set_defaults(func=mkcol)

    args = parser.parse_args()

    logging.basicConfig(format="[%(levelname)-7s:%(name)-15s] %(message)s", level=logging.INFO)
    logging.getLogger("botocore").setLevel(logging.WARNING)

    if inspect.iscoroutinefunction(args.func):
        asyncio.run(args.func(args))
    else:
        args.func(args)


if __name__ == "__main__":
    main()
