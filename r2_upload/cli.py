import argparse
import logging
import mimetypes
import sys
from collections import namedtuple
from pathlib import Path
from typing import Iterable, Sequence

from botocore.exceptions import BotoCoreError, ClientError
from dotenv import load_dotenv
from tabulate import tabulate

from .datamodel import R2Config
from .errors import ConfigurationError, R2UploadError
from .s3_helpers import verify_upload
from .uploader import R2Uploader

logger = logging.getLogger(__name__)

ReportRow = namedtuple("ReportRow", ("file", "path", "size", "verified", "result"))

REPORT_HEADERS = ("File", "Storage path", "Size", "Verified", "Result")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="r2-upload",
        description="Upload files to the configured R2 bucket and print their public URLs.",
    )
    parser.add_argument("files", nargs="+", type=Path, metavar="FILE")
    parser.add_argument("--folder", help="storage folder prefix, e.g. weekly-reports")
    parser.add_argument(
        "--verify",
        action="store_true",
        help="HEAD each object after upload and compare its size",
    )
    parser.add_argument("--env-file", type=Path, help="dotenv file to load first")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def _upload_one(
    uploader: R2Uploader, file_path: Path, folder: str | None, verify: bool
) -> ReportRow:
    try:
        content_type, _ = mimetypes.guess_type(file_path.name)
        result = uploader.upload(
            file_path.read_bytes(), file_path.name, content_type, folder
        )
    except (OSError, R2UploadError) as e:
        return ReportRow(str(file_path), "", "", "", f"FAILURE: {e}")

    verified = ""
    if verify:
        try:
            ok = verify_upload(uploader.config, result.path, result.size)
        except (ClientError, BotoCoreError) as e:
            logger.error("Could not verify %s: %s", result.path, e)
            ok = False
        verified = "yes" if ok else "NO"
    return ReportRow(str(file_path), result.path, result.size, verified, result.url)


def run_uploads(
    uploader: R2Uploader,
    files: Iterable[Path],
    folder: str | None = None,
    verify: bool = False,
) -> list[ReportRow]:
    return [_upload_one(uploader, file_path, folder, verify) for file_path in files]


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv(args.env_file)

    try:
        config = R2Config.from_env()
    except ConfigurationError as e:
        logger.error("%s", e)
        return 2

    rows = run_uploads(R2Uploader(config), args.files, args.folder, args.verify)
    print(tabulate(rows, headers=REPORT_HEADERS))

    failed = [
        row for row in rows if row.result.startswith("FAILURE") or row.verified == "NO"
    ]
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
