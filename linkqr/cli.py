"""linkqr CLI: render, verify and maintain styled profile QR codes."""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from PIL import Image

from linkqr.config import RenderConfig, base_url_from_env
from linkqr.errors import QRRenderError
from linkqr.eyes import EyeStyle
from linkqr.logging import audit, get_logger, setup_logging

log = get_logger("cli")


def _config_from_args(args) -> RenderConfig:
    config = RenderConfig.from_env()
    overrides = {}
    if getattr(args, "primary", None):
        overrides["primary"] = args.primary
    if getattr(args, "secondary", None):
        overrides["secondary"] = args.secondary
    if getattr(args, "logo", None):
        overrides["logo_paths"] = tuple(args.logo)
    if getattr(args, "bold_eyes", False):
        overrides["eye_style"] = EyeStyle()
    return replace(config, **overrides) if overrides else config


def _write_output(args, target: str, config: RenderConfig):
    from linkqr.encode import to_data_uri
    from linkqr.matrix import generate_plain_qr
    from linkqr.pipeline import render_styled_qr

    img = generate_plain_qr(target) if args.plain else render_styled_qr(target, config=config)
    if args.data_uri:
        print(to_data_uri(img))
        return
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    img.save(output)
    print(f"Generated: {output} ({img.size[0]}x{img.size[1]}) -> {target}")


def cmd_generate(args):
    """Render a styled QR code for any string."""
    _write_output(args, args.url, _config_from_args(args))


def cmd_profile(args):
    """Render the QR code for a user's public profile."""
    from linkqr.pipeline import profile_url

    base_url = (args.base_url or base_url_from_env()).rstrip("/")
    _write_output(args, profile_url(base_url, args.username), _config_from_args(args))


def cmd_verify(args):
    """Verify a QR code image."""
    from linkqr.verify import verify

    img = Image.open(args.image)
    results = verify(img, expected_data=args.expected)

    for r in results:
        status = "PASS" if r.success else "FAIL"
        print(f"  [{r.decoder:12s}] {status} | {r.decode_time_ms:6.1f}ms | {r.decoded_data or r.error}")

    sys.exit(0 if any(r.success for r in results) else 1)


def cmd_regenerate(args):
    """Re-render the QR code of every stored profile."""
    from linkqr.profiles import ProfileStore, regenerate_all

    store = ProfileStore(args.db)
    base_url = (args.base_url or base_url_from_env()).rstrip("/")
    summary = regenerate_all(store, base_url, config=_config_from_args(args))

    print(f"Regenerated: {len(summary.succeeded)}")
    print(f"Errors:      {len(summary.failed)}")
    for username in summary.failed:
        print(f"  failed: {username}")
    print(f"Total:       {summary.total}")
    sys.exit(0 if not summary.failed else 1)


def cmd_serve(args):
    """Start the profile QR HTTP server."""
    from linkqr.profiles import ProfileStore
    from linkqr.server import create_app

    store = ProfileStore(args.db)
    base_url = (args.base_url or base_url_from_env()).rstrip("/")
    app = create_app(store, base_url, config=_config_from_args(args))
    print(f"Starting QR server on http://0.0.0.0:{args.port}")
    print(f"Profile base URL: {base_url}")
    app.run(host="0.0.0.0", port=args.port, debug=args.debug)


def _add_style_flags(p):
    p.add_argument("--primary", default=None, help="Primary colour (e.g. '#4caf50')")
    p.add_argument("--secondary", default=None, help="Secondary gradient colour")
    p.add_argument("--logo", action="append", default=None,
                   help="Logo candidate path (repeatable; first existing wins)")
    p.add_argument("--bold-eyes", action="store_true",
                   help="Bold-ring eye glyph (strict decoders may not scan it)")


def _add_output_flags(p, default_output):
    p.add_argument("-o", "--output", default=default_output, help="Output PNG path")
    p.add_argument("--data-uri", action="store_true", help="Print a data URI instead of writing a file")
    p.add_argument("--plain", action="store_true", help="Unstyled black-on-white QR")


def main(argv=None):
    parser = argparse.ArgumentParser(prog="linkqr", description="Styled profile QR codes")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- generate ---
    p_gen = subparsers.add_parser("generate", help="Render a styled QR code")
    p_gen.add_argument("url", help="URL or text to encode")
    _add_output_flags(p_gen, "output/qr.png")
    _add_style_flags(p_gen)

    # --- profile ---
    p_prof = subparsers.add_parser("profile", help="Render a user's profile QR code")
    p_prof.add_argument("username", help="Profile username")
    p_prof.add_argument("--base-url", default=None, help="Public base URL (default: $LINKQR_BASE_URL)")
    _add_output_flags(p_prof, "output/profile_qr.png")
    _add_style_flags(p_prof)

    # --- verify ---
    p_ver = subparsers.add_parser("verify", help="Decode a QR code image")
    p_ver.add_argument("image", help="Path to QR code image")
    p_ver.add_argument("--expected", default=None, help="Expected decoded data (fails if mismatch)")

    # --- regenerate ---
    p_regen = subparsers.add_parser("regenerate", help="Re-render every stored profile QR")
    p_regen.add_argument("--db", default="profiles.json", help="Profile store path")
    p_regen.add_argument("--base-url", default=None, help="Public base URL (default: $LINKQR_BASE_URL)")
    _add_style_flags(p_regen)

    # --- serve ---
    p_serve = subparsers.add_parser("serve", help="Start the HTTP server")
    p_serve.add_argument("--db", default="profiles.json", help="Profile store path")
    p_serve.add_argument("--port", type=int, default=8080, help="Port to listen on")
    p_serve.add_argument("--base-url", default=None, help="Public base URL (default: $LINKQR_BASE_URL)")
    p_serve.add_argument("--debug", action="store_true", help="Enable debug mode")

    args = parser.parse_args(argv)

    # Setup logging before any command runs
    level = "DEBUG" if args.verbose else "INFO"
    setup_logging(level=level, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "generate": cmd_generate,
        "profile": cmd_profile,
        "verify": cmd_verify,
        "regenerate": cmd_regenerate,
        "serve": cmd_serve,
    }
    try:
        commands[args.command](args)
    except QRRenderError as exc:
        log.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
