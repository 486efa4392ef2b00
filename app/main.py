import argparse
import json
import shutil
import signal
import sys
import tempfile
import uuid
from pathlib import Path
from types import FrameType

from app.cancellation.coordinator import CancellationCoordinator
from app.config.settings import Settings
from app.database.connection import apply_schema, close_pool, init_pool
from app.database.repositories.translation_repository import TranslationRepository
from app.logging.logger import Log
from app.processor.models import UploadRequest
from app.processor.processor import build_orchestrator
from app.progress.sink import LoggingProgressSink


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m app.main",
        description="OCR a PDF with a vision model and translate it to English.",
    )
    parser.add_argument("pdf", type=Path, help="Path to the PDF file")
    parser.add_argument("--language", default="hindi", help="Source language (hindi, sanskrit, ...)")
    parser.add_argument("--pages", default="", help='Page ranges, e.g. "1-5, 8, 11-13"')
    parser.add_argument("--ocr-prompt", default=None, help="Custom OCR prompt")
    parser.add_argument(
        "--translation-prompt",
        default=None,
        help="Custom translation prompt; {TEXT} is replaced by the page text",
    )
    parser.add_argument("--user-id", type=int, default=None, help="Save the result for this user")
    return parser.parse_args(argv)


def _stage_upload(source: Path) -> Path:
    """Copy the input into a scratch upload file; the pipeline deletes it when done."""
    staged = Path(tempfile.mkdtemp(prefix="ocr-upload-")) / f"{uuid.uuid4().hex}.pdf"
    shutil.copyfile(source, staged)
    return staged


def main(argv: list[str] | None = None) -> int:
    """Entry point: load settings -> build dependencies -> run one PDF -> print JSON."""
    args = parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level, stream=sys.stderr)

    if not args.pdf.is_file():
        Log.error(f"PDF not found: {args.pdf}")
        return 2

    repository: TranslationRepository | None = None
    if settings.db_enabled:
        init_pool(settings)
        apply_schema()
        repository = TranslationRepository()

    try:
        coordinator = CancellationCoordinator(settings.cancel_grace_seconds)
        orchestrator = build_orchestrator(settings, coordinator=coordinator, repository=repository)
        connection_id = f"cli-{uuid.uuid4().hex[:8]}"

        def _cancel(signum: int, frame: FrameType | None) -> None:
            Log.warning("Interrupt received, cancelling")
            coordinator.cancel(connection_id, user_initiated=True)

        staged = _stage_upload(args.pdf)
        previous_handler = signal.signal(signal.SIGINT, _cancel)
        try:
            result = orchestrator.run(
                UploadRequest(
                    source_path=staged,
                    original_name=args.pdf.name,
                    language=args.language,
                    page_ranges=args.pages,
                    custom_ocr_prompt=args.ocr_prompt,
                    custom_translation_prompt=args.translation_prompt,
                    connection_id=connection_id,
                    user_id=args.user_id,
                ),
                sink=LoggingProgressSink(),
            )
        finally:
            signal.signal(signal.SIGINT, previous_handler)
            shutil.rmtree(staged.parent, ignore_errors=True)
    finally:
        if repository is not None:
            close_pool()

    json.dump(result.to_dict(), sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
