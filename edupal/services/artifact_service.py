"""
Study material service: cache-or-generate for flashcards and quizzes

Pipeline per request: fetch resource -> extract text -> prompt -> Gemini ->
validate JSON -> persist -> respond. Nothing is retried; the client offers a
manual regenerate instead.
"""
import logging
from typing import Any, Callable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from edupal.database import utcnow
from edupal.exceptions import (
    NotFoundError,
    PersistenceError,
    ServiceUnavailableError,
    ValidationError,
)
from edupal.models import Resource, StudyArtifact
from edupal.services.gemini_service import GeminiService, parse_model_output
from edupal.services.prompts import build_prompt
from edupal.services.storage_service import SupabaseStorage, storage_path_from_url
from edupal.services.text_extraction import extract_text
from edupal.utils.cache import ArtifactCache

logger = logging.getLogger(__name__)


class StudyMaterialService:
    """
    Request-scoped service; all collaborators are passed in explicitly.
    """

    def __init__(
        self,
        db: Session,
        generator: Optional[GeminiService],
        storage: Optional[SupabaseStorage],
        cache: ArtifactCache,
        min_chars: int = 50,
        max_chars: int = 100_000,
        clock: Callable = utcnow,
    ):
        self.db = db
        self.generator = generator
        self.storage = storage
        self.cache = cache
        self.min_chars = min_chars
        self.max_chars = max_chars
        self.clock = clock

    def get_or_generate(
        self,
        resource_id: UUID,
        artifact_type: str,
        force_regenerate: bool = False
    ) -> Tuple[bool, List[Any]]:
        """
        Return (cached, content) for a resource

        A cache hit skips all storage and model work unless force_regenerate
        is set. A failed write after generation is logged and the fresh
        content is still returned.
        """
        if self.generator is None:
            raise ServiceUnavailableError("AI integration is not configured yet (Missing GEMINI_API_KEY)")

        if not force_regenerate:
            cached = self.find_cached(resource_id, artifact_type)
            if cached is not None:
                logger.info(f"Returning cached {artifact_type} for resource {resource_id}")
                return True, cached

        logger.info(
            f"Generating {artifact_type} for resource {resource_id} "
            f"(force_regenerate={force_regenerate})"
        )
        content = self.generate(resource_id, artifact_type)
        self.save(resource_id, artifact_type, content)
        return False, content

    def get_artifact(self, resource_id: UUID, artifact_type: str) -> Optional[StudyArtifact]:
        return self.db.query(StudyArtifact).filter(
            StudyArtifact.resource_id == resource_id,
            StudyArtifact.type == artifact_type
        ).first()

    def find_cached(self, resource_id: UUID, artifact_type: str) -> Optional[List[Any]]:
        """Redis first, then the artifacts table"""
        key = self.cache.cache_key(str(resource_id), artifact_type)

        hot = self.cache.get(key)
        if hot is not None:
            return hot

        artifact = self.get_artifact(resource_id, artifact_type)
        if artifact is None:
            return None

        self.cache.set(key, artifact.content)
        return artifact.content

    def generate(self, resource_id: UUID, artifact_type: str) -> List[Any]:
        """Run the full pipeline without touching the cache"""
        if self.storage is None:
            raise ServiceUnavailableError("File storage is not configured")

        resource = self.db.query(Resource).filter(Resource.id == resource_id).first()
        if not resource:
            raise NotFoundError("Resource not found")

        if not resource.file_url:
            raise ValidationError("Resource has no file attached")

        file_path = storage_path_from_url(resource.file_url, self.storage.bucket)
        if not file_path:
            raise ValidationError("Invalid file path")

        data = self.storage.download(file_path)
        text = extract_text(data, file_path.lower(), self.min_chars, self.max_chars)

        prompt = build_prompt(artifact_type, text)
        raw_text = self.generator.generate(prompt)
        content = parse_model_output(raw_text)

        logger.info(f"Generated {len(content)} {artifact_type} items for resource {resource_id}")
        return content

    def save(self, resource_id: UUID, artifact_type: str, content: List[Any]) -> Optional[StudyArtifact]:
        """Write-through; failures are logged, never raised"""
        try:
            artifact = self._upsert(resource_id, artifact_type, content)
        except PersistenceError as e:
            logger.error(f"Failed to cache AI {artifact_type} for resource {resource_id}: {e.message}")
            return None

        self.cache.set(self.cache.cache_key(str(resource_id), artifact_type), content)
        return artifact

    def _upsert(self, resource_id: UUID, artifact_type: str, content: List[Any]) -> StudyArtifact:
        try:
            artifact = self._write(resource_id, artifact_type, content)
            self.db.commit()
            return artifact
        except IntegrityError:
            self.db.rollback()
            # Another request inserted the row between our read and our insert
            logger.warning(
                f"Concurrent first generation for {resource_id}/{artifact_type}; "
                f"overwriting the existing row"
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e))

        try:
            artifact = self.get_artifact(resource_id, artifact_type)
            if artifact is None:
                raise PersistenceError("Artifact row vanished after a duplicate-key conflict")
            artifact.content = content
            artifact.generated_at = self.clock()
            self.db.commit()
            return artifact
        except SQLAlchemyError as e:
            self.db.rollback()
            raise PersistenceError(str(e))

    def _write(self, resource_id: UUID, artifact_type: str, content: List[Any]) -> StudyArtifact:
        artifact = self.get_artifact(resource_id, artifact_type)
        now = self.clock()

        if artifact:
            artifact.content = content
            artifact.generated_at = now
        else:
            artifact = StudyArtifact(
                resource_id=resource_id,
                type=artifact_type,
                content=content,
                generated_at=now
            )
            self.db.add(artifact)

        self.db.flush()
        return artifact
