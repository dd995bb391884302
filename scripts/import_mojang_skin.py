"""Download the official Mojang skin of a player.

Usage: python scripts/import_mojang_skin.py <username> [destination]
"""
from __future__ import annotations

import hashlib
import sys
from pathlib import Path
from typing import List, Optional

from ygg_server.app.config import settings
from ygg_server.app.errors import YggdrasilError
from ygg_server.app.mojang import MojangClient
from ygg_server.app.resolver import MojangSkinResolver
from ygg_server.app.storage import fetch_texture


def lookup_skin_url(resolver: MojangSkinResolver, username: str) -> Optional[str]:
    account = resolver.resolve_account(username)
    print(f"[account] {account.name} -> {account.id}")
    return resolver.resolve_profile_skin(account.id)


def main(argv: Optional[List[str]] = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if not args:
        print(__doc__.strip(), file=sys.stderr)
        return 2

    username = args[0]
    destination = Path(args[1]) if len(args) > 1 else Path(f"{username}.png")

    try:
        skin_url = lookup_skin_url(MojangSkinResolver(MojangClient()), username)
        if skin_url is None:
            print(f"[error] {username} has no skin in its textures property", file=sys.stderr)
            return 1
        print(f"[download] {skin_url} -> {destination}")
        data = fetch_texture(skin_url, settings.max_upload_bytes, settings.request_timeout)
    except YggdrasilError as exc:
        print(f"[error] {exc.message}", file=sys.stderr)
        return 1

    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    print(f"[done] sha256={hashlib.sha256(data).hexdigest()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
