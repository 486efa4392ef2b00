from dataclasses import replace

from app.database.models import TranslationPageRecord, TranslationRecord
from app.database.repositories.translation_repository import TranslationRepository
from app.logging.logger import Log
from app.ocr.extractor import OcrEngine
from app.ocr.models import OcrStatus
from app.pdf.base import BasePdfRasterizer
from app.pdf.page_ranges import parse_page_ranges
from app.processor.exceptions import NoValidPagesError
from app.processor.file_loader import FileLoader
from app.processor.models import PageResult
from app.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from app.storage.image_store import PageImageStore
from app.translation.models import TranslationOutcome
from app.translation.translator import Translator

# Progress partition of one run, in percent.
LOAD_STEP = 0
RASTERIZE_RANGE = (10, 50)
EXTRACT_START = 50
EXTRACT_RANGE = (55, 75)
TRANSLATE_RANGE = (75, 98)
FINALIZE_STEP = 98
DONE_STEP = 100


class LoadDocumentStep(PipelineStep):
    state = PipelineState.RASTERIZING

    def __init__(self, file_loader: FileLoader) -> None:
        self._file_loader = file_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.report("Loading PDF document...", LOAD_STEP)
        context.pdf_bytes = self._file_loader.load(context.request.source_path)
        context.file_size = len(context.pdf_bytes)
        Log.info(
            f"Loaded {context.file_size} bytes for '{context.request.original_name}'"
        )
        return context


class RasterizeStep(PipelineStep):
    state = PipelineState.RASTERIZING

    def __init__(self, rasterizer: BasePdfRasterizer) -> None:
        self._rasterizer = rasterizer

    def run(self, context: PipelineContext) -> PipelineContext:
        selection = parse_page_ranges(context.request.page_ranges)
        pages = self._rasterizer.rasterize(
            context.pdf_bytes,
            selection,
            context.progress.scoped(*RASTERIZE_RANGE),
        )
        if not pages:
            raise NoValidPagesError("No valid pages selected for conversion.")
        placeholders = sum(1 for page in pages if page.is_placeholder)
        if placeholders:
            Log.warning(f"{placeholders} of {len(pages)} pages replaced by placeholders")
        context.pages = pages
        return context


class StoreImagesStep(PipelineStep):
    state = PipelineState.RASTERIZING

    def __init__(self, image_store: PageImageStore) -> None:
        self._image_store = image_store

    def run(self, context: PipelineContext) -> PipelineContext:
        context.pages = [
            replace(
                page,
                image_path=self._image_store.save(
                    context.session_id, page.page_number, page.image_bytes
                ),
            )
            for page in context.pages
        ]
        return context


class ExtractTextStep(PipelineStep):
    state = PipelineState.EXTRACTING_TEXT

    def __init__(self, ocr_engine: OcrEngine) -> None:
        self._ocr_engine = ocr_engine

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.report("Starting text extraction...", EXTRACT_START)
        context.ocr_outcomes = self._ocr_engine.extract_text(
            context.pages,
            context.request.language,
            context.progress.scoped(*EXTRACT_RANGE),
            custom_prompt=context.request.custom_ocr_prompt,
            cancellation=context.cancellation,
        )
        return context


class TranslateStep(PipelineStep):
    state = PipelineState.TRANSLATING

    def __init__(self, translator: Translator) -> None:
        self._translator = translator

    def run(self, context: PipelineContext) -> PipelineContext:
        outcomes = context.ocr_outcomes
        progress = context.progress.scoped(*TRANSLATE_RANGE)
        progress.begin(f"Starting translation of {len(outcomes)} pages...")
        translations: list[TranslationOutcome] = []
        for index, outcome in enumerate(outcomes):
            context.cancellation.check()
            progress.report(f"Translating page {outcome.page_number}...", index, len(outcomes))
            if outcome.status is OcrStatus.TECHNICAL_ERROR:
                # Error text is passed through untranslated.
                text = outcome.text
            else:
                text = self._translator.translate(
                    outcome.text,
                    context.request.language,
                    progress,
                    custom_prompt=context.request.custom_translation_prompt,
                    cancellation=context.cancellation,
                )
            translations.append(TranslationOutcome(page_number=outcome.page_number, text=text))
        progress.finish("Translation completed for all pages.")
        context.translations = translations
        return context


class FinalizeStep(PipelineStep):
    state = PipelineState.FINALIZING

    def run(self, context: PipelineContext) -> PipelineContext:
        context.progress.report("Finalizing results...", FINALIZE_STEP)
        translated = {item.page_number: item.text for item in context.translations}
        context.results = [
            PageResult(
                page=outcome.page_number,
                text=outcome.text,
                translation=translated.get(outcome.page_number, ""),
                image_path=outcome.image_path,
            )
            for outcome in context.ocr_outcomes
        ]
        return context


class PersistStep(PipelineStep):
    """Auto-saves the finished translation for signed-in users; never fails the run."""

    state = PipelineState.FINALIZING

    def __init__(self, repository: TranslationRepository | None) -> None:
        self._repository = repository

    def run(self, context: PipelineContext) -> PipelineContext:
        request = context.request
        if request.user_id is None or self._repository is None:
            Log.debug("Skipping auto-save: no user or no persistence store")
            return context
        record = TranslationRecord(
            user_id=request.user_id,
            original_file_name=request.original_name,
            language=request.language,
            file_size=context.file_size,
            page_count=len(context.results),
            custom_ocr_prompt=request.custom_ocr_prompt,
            custom_translation_prompt=request.custom_translation_prompt,
            pages=[
                TranslationPageRecord(
                    page_number=result.page,
                    original_text=result.text,
                    translated_text=result.translation,
                    image_path=result.image_path,
                )
                for result in context.results
            ],
        )
        try:
            context.saved_id = self._repository.save(record)
        except Exception as exc:
            Log.error(f"Auto-save failed for user {request.user_id}: {exc}")
            context.auto_saved = False
            return context
        context.auto_saved = True
        Log.info(f"Translation auto-saved with id {context.saved_id}")
        context.progress.report("Translation saved automatically.")
        return context
