import io
import uuid
from collections.abc import Sequence

from PIL import Image, UnidentifiedImageError

from app.cancellation.cancellation_token import CancellationToken
from app.cancellation.coordinator import CancellationCoordinator
from app.cancellation.exceptions import OperationCancelledError
from app.config.settings import Settings
from app.database.repositories.translation_repository import TranslationRepository
from app.llm.factory import VisionClientFactory
from app.logging.logger import Log
from app.ocr.extractor import OcrEngine
from app.ocr.models import OcrStatus
from app.ocr.strategies import build_default_strategies
from app.pdf.exceptions import PdfRasterizationError
from app.pdf.factory import PdfRasterizerFactory
from app.pdf.models import RasterizedPage
from app.processor.exceptions import ProcessorError
from app.processor.file_loader import FileLoader
from app.processor.models import PageResult, PipelineResult, UploadRequest
from app.processor.pipeline import PipelineContext, PipelineState, PipelineStep
from app.processor.steps import (
    DONE_STEP,
    ExtractTextStep,
    FinalizeStep,
    LoadDocumentStep,
    PersistStep,
    RasterizeStep,
    StoreImagesStep,
    TranslateStep,
)
from app.progress.progress_log import ProgressLog
from app.progress.sink import ProgressSink
from app.storage.exceptions import ImageStoreError
from app.storage.image_store import PageImageStore
from app.translation.translator import Translator


class PipelineOrchestrator:
    """Drives one upload through rasterize -> OCR -> translate -> finalize.

    Each step declares the state it runs in; the orchestrator moves the state
    machine forward before running it. A user cancel unwinds to ``cancelled``
    and any other error to ``failed``. Both end with a result, never an
    exception.
    """

    def __init__(
        self,
        *,
        steps: Sequence[PipelineStep],
        coordinator: CancellationCoordinator,
        image_store: PageImageStore,
        file_loader: FileLoader,
        ocr_engine: OcrEngine,
        translator: Translator,
        repository: TranslationRepository | None = None,
        image_max_age_seconds: float = 3600,
    ) -> None:
        self._steps = list(steps)
        self._coordinator = coordinator
        self._image_store = image_store
        self._file_loader = file_loader
        self._ocr_engine = ocr_engine
        self._translator = translator
        self._repository = repository
        self._image_max_age_seconds = image_max_age_seconds

    @property
    def coordinator(self) -> CancellationCoordinator:
        return self._coordinator

    def run(self, request: UploadRequest, sink: ProgressSink | None = None) -> PipelineResult:
        """Process one uploaded PDF. The source file is removed afterwards."""
        connection_id = request.connection_id or uuid.uuid4().hex
        token = self._coordinator.open_token(connection_id)
        progress = ProgressLog(
            connection_id=connection_id,
            sink=sink,
            should_emit=lambda: token.should_emit_progress,
        )
        context = PipelineContext(request=request, progress=progress, cancellation=token)
        Log.info(
            f"Processing '{request.original_name}' (language={request.language}, "
            f"pages='{request.page_ranges or 'all'}', connection={connection_id})"
        )

        try:
            self._sweep_images()
            context.session_id = self._image_store.open_session()
            for step in self._steps:
                token.check()
                if context.state is not step.state:
                    context.transition(step.state)
                context = step.run(context)
            context.transition(PipelineState.DONE)
            progress.report("Processing complete!", DONE_STEP)
            Log.info(f"Finished '{request.original_name}': {len(context.results)} pages")
            return self._success_result(context)
        except OperationCancelledError:
            context.transition(PipelineState.CANCELLED)
            Log.warning(f"Processing of '{request.original_name}' cancelled by user")
            progress.report("Processing cancelled by user.")
            self._discard_session(context)
            return PipelineResult(
                success=False,
                cancelled=True,
                message="Processing was cancelled by user",
                progress=progress.to_list(),
            )
        except (ProcessorError, PdfRasterizationError, ImageStoreError) as exc:
            return self._fail(context, str(exc))
        except Exception as exc:
            Log.exception(f"Unexpected {type(exc).__name__} while processing: {exc}")
            return self._fail(context, f"Error processing PDF: {exc}")
        finally:
            self._coordinator.unregister(connection_id)
            if context.session_id is not None:
                self._image_store.close_session(context.session_id)
            self._file_loader.remove(request.source_path)

    def redo_page(
        self,
        image_path: str,
        language: str,
        custom_ocr_prompt: str | None = None,
        custom_translation_prompt: str | None = None,
        connection_id: str | None = None,
    ) -> PageResult:
        """Run OCR and translation again for one stored page image.

        Raises:
            ImageStoreError: if ``image_path`` does not belong to the image store.
            OperationCancelledError: if the user cancels while it runs.
        """
        page = self._load_page(image_path)
        Log.info(f"Redoing OCR and translation for page {page.page_number} ({image_path})")
        token = self._open_token(connection_id)
        try:
            outcome = self._ocr_engine.extract_page(page, language, custom_ocr_prompt, token)
            if outcome.status is OcrStatus.TECHNICAL_ERROR:
                translation = outcome.text
            else:
                translation = self._translator.translate(
                    outcome.text,
                    language,
                    custom_prompt=custom_translation_prompt,
                    cancellation=token,
                )
        finally:
            if connection_id:
                self._coordinator.unregister(connection_id)
        return PageResult(
            page=page.page_number,
            text=outcome.text,
            translation=translation,
            image_path=image_path,
        )

    def redo_translation(
        self,
        text: str,
        language: str,
        custom_translation_prompt: str | None = None,
        connection_id: str | None = None,
    ) -> str:
        """Translate edited page text again.

        Raises:
            ValueError: if ``text`` is blank.
            OperationCancelledError: if the user cancels before the call.
        """
        if not text.strip():
            raise ValueError("Text is required for translation")
        token = self._open_token(connection_id)
        try:
            return self._translator.translate(
                text,
                language,
                custom_prompt=custom_translation_prompt,
                cancellation=token,
            )
        finally:
            if connection_id:
                self._coordinator.unregister(connection_id)

    def _open_token(self, connection_id: str | None) -> CancellationToken:
        if connection_id:
            return self._coordinator.open_token(connection_id)
        return CancellationToken()

    def _load_page(self, image_path: str) -> RasterizedPage:
        page_number = self._image_store.page_number_of(image_path)
        image_bytes = self._image_store.load(image_path)
        width = height = 0
        if image_bytes:
            try:
                with Image.open(io.BytesIO(image_bytes)) as image:
                    width, height = image.size
            except UnidentifiedImageError:
                Log.warning(f"Stored image {image_path} is not a readable image")
        return RasterizedPage(
            page_number=page_number,
            image_bytes=image_bytes,
            width=width,
            height=height,
            image_path=image_path,
        )

    def _sweep_images(self) -> None:
        preserved: set[str] = set()
        if self._repository is not None:
            try:
                preserved = self._repository.list_image_paths()
            except Exception as exc:
                # Without the preserved set a sweep could delete saved images.
                Log.warning(f"Skipping image cleanup, stored image paths unavailable: {exc}")
                return
        try:
            self._image_store.sweep(self._image_max_age_seconds, preserved)
        except OSError as exc:
            Log.warning(f"Image cleanup failed: {exc}")

    def _discard_session(self, context: PipelineContext) -> None:
        if context.session_id is not None:
            self._image_store.discard_session(context.session_id)

    def _fail(self, context: PipelineContext, message: str) -> PipelineResult:
        Log.error(
            f"Processing of '{context.request.original_name}' failed "
            f"in state {context.state.value}: {message}"
        )
        context.error_message = message
        context.transition(PipelineState.FAILED)
        context.progress.report(message)
        self._discard_session(context)
        return PipelineResult(
            success=False,
            message=message,
            progress=context.progress.to_list(),
        )

    @staticmethod
    def _success_result(context: PipelineContext) -> PipelineResult:
        return PipelineResult(
            success=True,
            original_name=context.request.original_name,
            file_size=context.file_size,
            page_count=len(context.results),
            pages=context.results,
            progress=context.progress.to_list(),
            language=context.request.language,
            auto_saved=context.auto_saved,
            saved_id=context.saved_id,
        )


def build_orchestrator(
    settings: Settings,
    coordinator: CancellationCoordinator | None = None,
    repository: TranslationRepository | None = None,
) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator with all required adapters."""
    client = VisionClientFactory.create(settings)
    rasterizer = PdfRasterizerFactory.create(settings)
    ocr_engine = OcrEngine(
        client=client,
        max_tokens=settings.ocr_max_tokens,
        temperature=settings.ocr_temperature,
        retry_max_attempts=settings.retry_max_attempts,
        retry_base_delay_ms=settings.retry_base_delay_ms,
        strategies=build_default_strategies(
            settings.fallback_max_attempts, settings.fallback_base_delay_ms
        ),
    )
    translator = Translator(
        client=client,
        max_tokens=settings.translation_max_tokens,
        temperature=settings.translation_temperature,
        retry_max_attempts=settings.retry_max_attempts,
        retry_base_delay_ms=settings.retry_base_delay_ms,
    )
    image_store = PageImageStore(settings.images_root, settings.images_public_prefix)
    file_loader = FileLoader()
    steps: list[PipelineStep] = [
        LoadDocumentStep(file_loader),
        RasterizeStep(rasterizer),
        StoreImagesStep(image_store),
        ExtractTextStep(ocr_engine),
        TranslateStep(translator),
        FinalizeStep(),
        PersistStep(repository),
    ]
    return PipelineOrchestrator(
        steps=steps,
        coordinator=coordinator or CancellationCoordinator(settings.cancel_grace_seconds),
        image_store=image_store,
        file_loader=file_loader,
        ocr_engine=ocr_engine,
        translator=translator,
        repository=repository,
        image_max_age_seconds=settings.image_max_age_seconds,
    )
