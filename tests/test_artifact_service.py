import json
from datetime import datetime, timedelta
from unittest.mock import Mock, patch

import pytest
from sqlalchemy.exc import OperationalError

from edupal.exceptions import ServiceUnavailableError
from edupal.models import StudyArtifact
from edupal.services.artifact_service import StudyMaterialService
from edupal.utils.cache import ArtifactCache

from tests.conftest import FLASHCARDS_JSON


class SteppingClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        self.now += timedelta(minutes=5)
        return self.now


@pytest.fixture
def clock():
    return SteppingClock(datetime(2026, 3, 1, 9, 0))


@pytest.fixture
def service(db_session, generator, storage, clock):
    return StudyMaterialService(
        db=db_session,
        generator=generator,
        storage=storage,
        cache=ArtifactCache(None),
        clock=clock
    )


def test_forced_regeneration_advances_timestamp(service, generator, db_session, make_resource):
    resource = make_resource()
    generator.responses = [FLASHCARDS_JSON, '[{"front": "new", "back": "card"}]']

    service.get_or_generate(resource.id, "flashcards")
    first = db_session.query(StudyArtifact).one()
    first_id, first_generated_at = first.id, first.generated_at

    cached, content = service.get_or_generate(resource.id, "flashcards", force_regenerate=True)
    assert cached is False
    assert content == [{"front": "new", "back": "card"}]

    row = db_session.query(StudyArtifact).one()
    assert row.id == first_id
    assert row.generated_at > first_generated_at


def test_cache_write_failure_still_returns_content(service, generator, db_session, make_resource):
    resource = make_resource()
    generator.responses = [FLASHCARDS_JSON]

    with patch.object(db_session, "commit", side_effect=OperationalError("INSERT", {}, Exception("disk full"))):
        cached, content = service.get_or_generate(resource.id, "flashcards")

    assert cached is False
    assert content == json.loads(FLASHCARDS_JSON)
    assert db_session.query(StudyArtifact).count() == 0


def test_duplicate_insert_overwrites_winning_row(service, db_session, make_resource, clock):
    resource = make_resource()
    winner = StudyArtifact(
        resource_id=resource.id,
        type="quiz",
        content=[{"question": "old"}],
        generated_at=datetime(2026, 1, 1)
    )
    db_session.add(winner)
    db_session.commit()

    # Simulate the race: our read misses the row another request just inserted
    real_get = service.get_artifact
    calls = []

    def racing_get(resource_id, artifact_type):
        calls.append(artifact_type)
        if len(calls) == 1:
            return None
        return real_get(resource_id, artifact_type)

    with patch.object(service, "get_artifact", side_effect=racing_get):
        saved = service.save(resource.id, "quiz", [{"question": "new"}])

    assert saved is not None
    rows = db_session.query(StudyArtifact).filter_by(resource_id=resource.id, type="quiz").all()
    assert len(rows) == 1
    assert rows[0].content == [{"question": "new"}]
    assert rows[0].generated_at > datetime(2026, 1, 1)


def test_hot_cache_hit_skips_database(db_session, generator, storage, make_resource):
    resource = make_resource()
    redis_client = Mock()
    redis_client.get.return_value = FLASHCARDS_JSON

    service = StudyMaterialService(db_session, generator, storage, ArtifactCache(redis_client))
    cached, content = service.get_or_generate(resource.id, "flashcards")

    assert cached is True
    assert content == json.loads(FLASHCARDS_JSON)
    redis_client.get.assert_called_once_with(f"artifact:{resource.id}:flashcards")
    assert generator.prompts == []


def test_generation_refreshes_hot_cache(db_session, generator, storage, make_resource):
    resource = make_resource()
    generator.responses = [FLASHCARDS_JSON]
    redis_client = Mock()
    redis_client.get.return_value = None

    service = StudyMaterialService(db_session, generator, storage, ArtifactCache(redis_client, ttl=60))
    service.get_or_generate(resource.id, "flashcards")

    redis_client.setex.assert_called_once_with(
        f"artifact:{resource.id}:flashcards", 60, json.dumps(json.loads(FLASHCARDS_JSON))
    )


def test_force_regenerate_ignores_hot_cache(db_session, generator, storage, make_resource):
    resource = make_resource()
    generator.responses = [FLASHCARDS_JSON]
    redis_client = Mock()
    redis_client.get.return_value = '[{"front": "stale", "back": "card"}]'

    service = StudyMaterialService(db_session, generator, storage, ArtifactCache(redis_client))
    cached, content = service.get_or_generate(resource.id, "flashcards", force_regenerate=True)

    assert cached is False
    assert content == json.loads(FLASHCARDS_JSON)
    redis_client.get.assert_not_called()


def test_redis_errors_fall_back_to_database(db_session, generator, storage, make_resource):
    resource = make_resource()
    db_session.add(StudyArtifact(
        resource_id=resource.id, type="flashcards",
        content=[{"front": "db", "back": "row"}], generated_at=datetime(2026, 2, 1)
    ))
    db_session.commit()

    redis_client = Mock()
    redis_client.get.side_effect = ConnectionError("redis down")
    redis_client.setex.side_effect = ConnectionError("redis down")

    service = StudyMaterialService(db_session, generator, storage, ArtifactCache(redis_client))
    assert service.get_or_generate(resource.id, "flashcards") == (True, [{"front": "db", "back": "row"}])


def test_unconfigured_generator_is_unavailable(db_session, storage, make_resource):
    resource = make_resource()
    service = StudyMaterialService(db_session, None, storage, ArtifactCache(None))

    with pytest.raises(ServiceUnavailableError):
        service.get_or_generate(resource.id, "quiz")
