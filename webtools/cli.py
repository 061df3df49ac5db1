"""
WebTools command line

Usage:
    webtools catalog [--category Dev] [--archetype form] [--featured] [--query seo] [--static-only]
    webtools classify ai-story-generator domain-checker
    webtools call story-generator "Once upon a time" [--relay http://127.0.0.1:3000]
    webtools upload image-compressor ./photo.png
    webtools serve [--host 0.0.0.0] [--port 3000]
"""

from __future__ import annotations

import argparse
import asyncio
import json
import mimetypes
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from .config import Settings, get_settings
from .schemas.tools import AgentSettings, ToolArchetype, ToolCategory
from .services.backend import BackendClient
from .services.catalog import CatalogLoader, ToolCatalog, STATIC_TOOLS
from .services.classifier import classify
from .services.normalizer import DirectContext, ExecutionContext, RelayContext, ToolCaller


def _print_json(payload) -> None:
    sys.stdout.write(json.dumps(payload, ensure_ascii=False) + "\n")
    sys.stdout.flush()


def _context(settings: Settings, relay: Optional[str]) -> ExecutionContext:
    if relay:
        return RelayContext(relay, timeout=settings.request_timeout)
    return DirectContext.from_settings(settings)


async def _load_catalog(settings: Settings, static_only: bool) -> ToolCatalog:
    if static_only:
        return ToolCatalog(STATIC_TOOLS)
    backend = BackendClient.from_settings(settings)
    try:
        return await CatalogLoader.from_settings(settings, backend).refresh()
    finally:
        await backend.close()


def cmd_catalog(args: argparse.Namespace, settings: Settings) -> int:
    catalog = asyncio.run(_load_catalog(settings, args.static_only))
    tools = catalog.filter(
        category=ToolCategory(args.category) if args.category else None,
        archetype=ToolArchetype(args.archetype) if args.archetype else None,
        featured=True if args.featured else None,
        query=args.query,
    )
    for tool in tools:
        _print_json(tool.model_dump(mode="json"))
    return 0


def cmd_classify(args: argparse.Namespace, settings: Settings) -> int:
    for tool_id in args.ids:
        metadata = classify(tool_id, settings.featured_ids)
        record = asdict(metadata)
        record["category"] = metadata.category.value
        record["archetype"] = metadata.archetype.value
        _print_json({"id": tool_id, **record})
    return 0


async def _call(args: argparse.Namespace, settings: Settings):
    caller = ToolCaller(_context(settings, args.relay))
    try:
        if args.command == "upload":
            path = Path(args.path)
            content_type = mimetypes.guess_type(path.name)[0]
            return await caller.call_file_tool(args.slug, path.name, path.read_bytes(), content_type)
        generation = AgentSettings(temperature=args.temperature, top_p=args.top_p, max_tokens=args.max_tokens)
        return await caller.call_tool(args.slug, args.prompt, generation)
    finally:
        await caller.close()


def cmd_call(args: argparse.Namespace, settings: Settings) -> int:
    result = asyncio.run(_call(args, settings))
    _print_json(result.model_dump(by_alias=True, exclude_none=True))
    return 0 if result.success else 1


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    uvicorn.run("webtools.main:app", host=args.host, port=args.port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="webtools", description="WebTools relay and tool client")
    sub = parser.add_subparsers(dest="command", required=True)

    catalog = sub.add_parser("catalog", help="Print the merged tool catalog as JSON lines")
    catalog.add_argument("--category", choices=[c.value for c in ToolCategory])
    catalog.add_argument("--archetype", choices=[a.value for a in ToolArchetype])
    catalog.add_argument("--featured", action="store_true", help="Only featured tools")
    catalog.add_argument("--query", help="Search title, description and tags")
    catalog.add_argument("--static-only", action="store_true", help="Skip the backend fetch")
    catalog.set_defaults(handler=cmd_catalog)

    classify_cmd = sub.add_parser("classify", help="Show how tool ids are classified")
    classify_cmd.add_argument("ids", nargs="+")
    classify_cmd.set_defaults(handler=cmd_classify)

    call = sub.add_parser("call", help="Run a text tool")
    call.add_argument("slug")
    call.add_argument("prompt")
    call.add_argument("--temperature", type=float)
    call.add_argument("--top-p", dest="top_p", type=float)
    call.add_argument("--max-tokens", dest="max_tokens", type=int)
    call.add_argument("--relay", help="Relay base URL; calls the backend directly when omitted")
    call.set_defaults(handler=cmd_call)

    upload = sub.add_parser("upload", help="Run a file tool")
    upload.add_argument("slug")
    upload.add_argument("path")
    upload.add_argument("--relay", help="Relay base URL; calls the backend directly when omitted")
    upload.set_defaults(handler=cmd_call)

    serve = sub.add_parser("serve", help="Run the relay server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)
    serve.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.handler(args, get_settings())


if __name__ == "__main__":
    sys.exit(main())
