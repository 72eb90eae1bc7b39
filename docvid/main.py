"""
docvid - server entry point

Runs the upload API under uvicorn.
"""
import argparse
import logging
from typing import List, Optional

from dotenv import load_dotenv

# Load environment variables (PORT, HOST, DOCVID_*) before settings are read
load_dotenv()

from docvid import settings  # noqa: E402

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Setup console (and optional file) logging"""
    log_level = logging.DEBUG if verbose else getattr(logging, settings.get_log_level(), logging.INFO)

    detailed_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(name)-20s | %(funcName)-15s:%(lineno)-4d | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    simple_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)-8s | %(message)s',
        datefmt='%H:%M:%S'
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level)
    console_handler.setFormatter(simple_formatter)
    handlers: List[logging.Handler] = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        handlers.append(file_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        force=True
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="docvid upload server")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or server.host)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: PORT or server.port)")
    parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")
    parser.add_argument("--log-file", default=None, help="Also write DEBUG logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)

    host = args.host or settings.get_server_host()
    port = args.port or settings.get_server_port()
    logger.info(f"Server running on http://{host}:{port}")

    import uvicorn
    uvicorn.run("docvid.api.main:app", host=host, port=port, reload=args.reload, log_config=None)


if __name__ == "__main__":
    main()
