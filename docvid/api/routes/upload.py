"""
Upload endpoint for docvid API.

Accepts the doctor details plus a video (and a background), runs the
composition, and returns the download location of the result.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from docvid import settings
from docvid.api.dependencies import get_composer, get_store
from docvid.api.exceptions import ProcessingError, ValidationError
from docvid.api.models.responses import UploadResponse
from docvid.core.text_formatter import TextFields, build_text_block
from docvid.media.composer import CompositionJob, VideoComposer
from docvid.media.exceptions import MediaProcessingError, UploadRejectedError
from docvid.utils.filename_utils import generate_output_filename
from docvid.utils.upload_store import StagedFile, UploadStore

logger = logging.getLogger(__name__)
router = APIRouter()

PROCESSED_URL_PREFIX = "/processed"
GENERIC_PROCESSING_ERROR = "Video processing failed."


def _present(upload: Optional[UploadFile]) -> bool:
    return upload is not None and bool(upload.filename)


@router.post("/upload", response_model=UploadResponse)
async def upload_video(
    doctor_name: Optional[str] = Form(None, alias="doctorName"),
    degree: Optional[str] = Form(None),
    mobile: Optional[str] = Form(None),
    address: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    background: Optional[UploadFile] = File(None),
    store: UploadStore = Depends(get_store),
    composer: VideoComposer = Depends(get_composer),
) -> UploadResponse:
    """Composite the uploaded video onto its background with the doctor details."""
    staged: List[StagedFile] = []

    try:
        staged_video = await store.stage(video, "video") if _present(video) else None
        if staged_video:
            staged.append(staged_video)
        staged_background = await store.stage(background, "background") if _present(background) else None
        if staged_background:
            staged.append(staged_background)
    except UploadRejectedError as e:
        store.discard(staged)
        logger.warning(f"Upload rejected: {e}")
        raise ValidationError(e.message, {"file": e.file_path}) from e
    except BaseException:
        # Disk errors and cancelled requests must not strand the first upload
        store.discard(staged)
        raise

    if staged_video is None:
        store.discard(staged)
        raise ValidationError("No video uploaded.")

    if staged_background is None and settings.is_background_required():
        store.discard(staged)
        raise ValidationError("No background uploaded.")

    fields = TextFields(
        doctor_name=doctor_name or "",
        degree=degree or "",
        mobile=mobile or "",
        address=address or "",
    )
    missing = fields.missing()
    if missing:
        store.discard(staged)
        raise ValidationError("All fields are required.", {"missing": missing})

    text_block = build_text_block(
        fields,
        wrap_width=settings.get_wrap_width(),
        profile=settings.get_escape_profile(),
    )

    processed_dir = settings.get_processed_dir()
    filename = generate_output_filename(processed_dir)
    job = CompositionJob(
        video_path=staged_video.path,
        background_path=staged_background.path if staged_background else None,
        background_kind=staged_background.kind if staged_background else None,
        output_path=processed_dir / filename,
        text_block=text_block,
    )

    succeeded = False
    try:
        await composer.compose_async(job)
        succeeded = True
    except MediaProcessingError as e:
        logger.error(f"Processing error for {filename}: {e}")
        message = e.message if settings.expose_processing_errors() else GENERIC_PROCESSING_ERROR
        raise ProcessingError(message, {"file": filename, "returncode": e.returncode}) from e
    finally:
        if succeeded or settings.should_cleanup_on_failure():
            leftovers = store.discard(staged)
            if leftovers:
                logger.warning(f"Staged inputs left behind: {[str(p) for p in leftovers]}")

    logger.info(f"Video processed successfully: {filename}")
    return UploadResponse(
        message="Video processed successfully.",
        file=filename,
        downloadUrl=f"{PROCESSED_URL_PREFIX}/{filename}",
    )
