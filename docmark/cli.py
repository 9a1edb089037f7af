from __future__ import annotations

import argparse
import asyncio
import json
from pathlib import Path

from docmark.core.config import get_settings
from docmark.core.errors import DocmarkError
from docmark.core.logging import configure_logging
from docmark.models import Anchor, DocumentRef, UploadedBuffer, WatermarkSpec
from docmark.services.engine import WatermarkEngine
from docmark.services.style_generator import generate
from docmark.storage.downloads import DirectorySink

logger = configure_logging("cli")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="docmark",
        description="Burn a text watermark into document pages, or print a generated style.",
    )
    sub = p.add_subparsers(dest="command", required=True)

    def add_identity(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("--text", default="CONFIDENTIAL", help="Watermark text.")
        cmd.add_argument(
            "--anchor",
            choices=[a.value for a in Anchor],
            default=Anchor.CENTERED.value,
            help="Placement on the page.",
        )
        cmd.add_argument("--document-id", default=None, help="Document id used in the style seed.")
        cmd.add_argument("--user-id", default="local", help="User id used in the style seed.")

    export = sub.add_parser("export", help="Watermark FILE and write the results.")
    export.add_argument("file", type=Path, help="Document to watermark.")
    add_identity(export)
    export.add_argument("--out", type=Path, default=None, help="Output directory (default: settings).")
    export.add_argument("--opacity", type=float, default=None)
    export.add_argument("--rotation", type=int, default=None)
    export.add_argument("--font", default=None, help="Font family.")
    export.add_argument("--font-size", type=int, default=None)
    export.add_argument("--color", default=None, help='CSS color, e.g. "#ff0000" or "hsl(10, 60%%, 40%%)".')
    export.add_argument("--pages", default=None, help='Page range such as "1-3,7-". Default: all pages.')
    style = export.add_mutually_exclusive_group()
    style.add_argument("--generate", action="store_true", help="Use the seed-generated style.")
    style.add_argument("--variant", default=None, help="Use a variant style for this nonce.")

    show = sub.add_parser("style", help="Print the generated style as JSON.")
    add_identity(show)
    show.add_argument("--nonce", default=None, help="Variant nonce (omit for the initial style).")
    return p


def _spec_from_args(args: argparse.Namespace) -> WatermarkSpec:
    changes = {
        "opacity": args.opacity,
        "rotation": args.rotation,
        "font_family": args.font,
        "font_size": args.font_size,
        "color": args.color,
        "page_range": args.pages,
    }
    return WatermarkSpec(text=args.text, anchor=Anchor(args.anchor)).update(
        **{key: value for key, value in changes.items() if value is not None}
    )


async def _export(args: argparse.Namespace) -> int:
    buffer = UploadedBuffer.from_path(args.file)
    document = DocumentRef(id=args.document_id or buffer.stem, title=buffer.name)
    engine = WatermarkEngine(document, args.user_id, spec=_spec_from_args(args))

    await engine.open_files([buffer])
    if args.generate:
        engine.generate_style()
    elif args.variant is not None:
        engine.regenerate_variant(args.variant)

    sink = DirectorySink(args.out or get_settings().downloads_dir)
    plan = await engine.export(sink)
    engine.close()

    for path in sink.written:
        print(path)
    if plan.is_settings_only:
        print(f"settings saved under {plan.settings_key}")
    for error in engine.errors:
        print(f"error: {error.message}")
    return 0 if (plan.artifacts or plan.is_settings_only) else 2


def main(argv: list[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)

    if args.command == "style":
        style = generate(args.text, args.anchor, args.document_id or "", args.user_id, nonce=args.nonce)
        print(json.dumps(style.model_dump(mode="json"), indent=2))
        return 0

    try:
        return asyncio.run(_export(args))
    except DocmarkError as exc:
        logger.error("%s", exc.message)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
