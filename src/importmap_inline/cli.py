"""
importmap-inline command line entry
Serve a directory with import maps inlined, or inline a single HTML file
"""
import argparse
import asyncio
import logging
import os
import sys

from .config import get_config


def setup_logging(level: str):
    logging.basicConfig(
        level=level.upper(),
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def cmd_serve(args):
    """Run the dev server"""
    import uvicorn
    from .server import create_app

    config = get_config()
    served_dir = args.served_dir or config['served_dir']
    host = args.host or config['host']
    port = args.port or config['port']
    log_level = args.log_level or config['log_level']

    setup_logging(log_level)
    app = create_app(served_dir)
    uvicorn.run(app, host=host, port=port, log_level=log_level)
    return 0


def cmd_inline(args):
    """Print an HTML file with its external import maps inlined"""
    from .transform import inline_import_maps

    document_path = os.path.abspath(args.file)
    served_root = os.path.abspath(args.root) if args.root else os.path.dirname(document_path)

    try:
        with open(document_path, encoding='utf-8') as f:
            html = f.read()
        output = asyncio.run(inline_import_maps(served_root, document_path, html))
    except (OSError, ValueError) as e:
        print(f"importmap-inline: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(output)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog='importmap-inline',
        description='importmap-inline - serve external import maps inline',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  importmap-inline serve ./app --port 8080
  importmap-inline inline ./app/index.html --root ./app > index.html
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    serve_parser = subparsers.add_parser('serve', help='Serve a directory')
    serve_parser.add_argument('served_dir', nargs='?', help='Directory to serve (default: IMPORTMAP_INLINE_SERVED_DIR or .)')
    serve_parser.add_argument('--host', help='Bind host')
    serve_parser.add_argument('--port', type=int, help='Bind port')
    serve_parser.add_argument('--log-level', choices=['critical', 'error', 'warning', 'info', 'debug'], help='Log level')
    serve_parser.set_defaults(func=cmd_serve)

    inline_parser = subparsers.add_parser('inline', help='Inline the import maps of one HTML file')
    inline_parser.add_argument('file', help='HTML file')
    inline_parser.add_argument('--root', help='Served directory for absolute src values (default: directory of FILE)')
    inline_parser.set_defaults(func=cmd_inline)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == '__main__':
    sys.exit(main())
