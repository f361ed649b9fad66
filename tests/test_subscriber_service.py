"""
Tests for the subscriber aggregate rules against a SQLite database.
"""
from datetime import datetime, timezone

import pytest

from mylo_api.database import db
from mylo_api.errors import NotFoundError, ValidationError
from mylo_api.models import SUBSCRIBER_TYPE_NAMES, Subscriber, SubscriberType
from mylo_api.schemas import SubscriberTypeName
from mylo_api.services.subscriber_service import SubscriberService


@pytest.fixture
def service(app):
    return SubscriberService(db.session)


def type_names(subscriber):
    return [t.name for t in subscriber.subscriber_types]


def type_rows():
    return db.session.query(SubscriberType).count()


class TestCreate:

    def test_create_and_read_back(self, service):
        created = service.create_subscriber({"email": "jane@example.com", "name": "Jane"})

        assert created.id
        fetched = service.get_subscriber(created.id)
        assert fetched.email == "jane@example.com"
        assert fetched.name == "Jane"
        assert fetched.subscriber_types == []

    def test_create_with_types(self, service):
        created = service.create_subscriber({
            "email": "jane@example.com",
            "name": "Jane",
            "subscriber_types": [{"name": "shopper"}, {"name": "driver"}],
        })

        assert type_names(created) == ["shopper", "driver"]
        assert all(t.id and t.subscriber_id == created.id for t in created.subscriber_types)

    @pytest.mark.parametrize("email", ["", "janeexample.com", "jane@example", "jane@example.c", None, 7])
    def test_rejects_bad_email_without_writing(self, service, email):
        with pytest.raises(ValidationError) as exc:
            service.create_subscriber({"email": email, "name": "Jane"})

        assert exc.value.message == "invalid or missing email"
        assert db.session.query(Subscriber).count() == 0

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_rejects_blank_name(self, service, name):
        with pytest.raises(ValidationError) as exc:
            service.create_subscriber({"email": "jane@example.com", "name": name})

        assert exc.value.message == "missing name"
        assert db.session.query(Subscriber).count() == 0

    def test_rejects_unknown_type(self, service):
        with pytest.raises(ValidationError):
            service.create_subscriber({
                "email": "jane@example.com",
                "name": "Jane",
                "subscriber_types": [{"name": "astronaut"}],
            })
        assert db.session.query(Subscriber).count() == 0

    def test_rejects_non_object_body(self, service):
        with pytest.raises(ValidationError) as exc:
            service.create_subscriber(None)
        assert exc.value.message == "Unable to parse request body"


class TestRead:

    def test_missing_id(self, service):
        with pytest.raises(NotFoundError):
            service.get_subscriber(999)

    @pytest.mark.parametrize("subscriber_id", [0, -1, 2 ** 31, 10 ** 20])
    def test_id_outside_serial_range(self, service, subscriber_id):
        with pytest.raises(NotFoundError):
            service.get_subscriber(subscriber_id)

    def test_repeated_reads_are_stable(self, service):
        created = service.create_subscriber({"email": "jane@example.com", "name": "Jane"})
        first = service.get_subscriber(created.id).to_dict()
        second = service.get_subscriber(created.id).to_dict()

        assert first == second

    def test_list_is_ordered_by_id(self, service):
        a = service.create_subscriber({"email": "a@example.com", "name": "A"})
        b = service.create_subscriber({"email": "b@example.com", "name": "B"})

        assert [s.id for s in service.list_subscribers()] == [a.id, b.id]


class TestUpdate:

    @pytest.fixture
    def subscriber(self, service):
        return service.create_subscriber({
            "email": "jane@example.com",
            "name": "Jane",
            "subscriber_types": [{"name": "shopper"}, {"name": "business"}],
        })

    def test_non_empty_list_replaces_types(self, service, subscriber):
        updated = service.update_subscriber(subscriber.id, {
            "email": "jane@example.com",
            "name": "Jane",
            "subscriber_types": [{"name": "donor"}],
        })

        assert type_names(updated) == ["donor"]
        assert type_rows() == 1

    def test_empty_list_clears_types(self, service, subscriber):
        updated = service.update_subscriber(subscriber.id, {
            "email": "jane@example.com", "name": "Jane", "subscriber_types": []})

        assert updated.subscriber_types == []
        assert type_rows() == 0

    @pytest.mark.parametrize("body_types", [{}, {"subscriber_types": None}])
    def test_absent_list_keeps_types(self, service, subscriber, body_types):
        updated = service.update_subscriber(subscriber.id, {
            "email": "new@example.com", "name": "Janet", **body_types})

        assert updated.email == "new@example.com"
        assert updated.name == "Janet"
        assert type_names(updated) == ["shopper", "business"]

    def test_invalid_input_leaves_everything_untouched(self, service, subscriber):
        with pytest.raises(ValidationError):
            service.update_subscriber(subscriber.id, {
                "email": "broken", "name": "Janet", "subscriber_types": []})

        db.session.expire_all()
        unchanged = service.get_subscriber(subscriber.id)
        assert unchanged.email == "jane@example.com"
        assert unchanged.name == "Jane"
        assert type_names(unchanged) == ["shopper", "business"]

    def test_type_only_change_bumps_updated_at(self, service, subscriber):
        subscriber.updated_at = datetime(2020, 1, 1, tzinfo=timezone.utc)
        db.session.commit()

        updated = service.update_subscriber(subscriber.id, {
            "email": "jane@example.com", "name": "Jane", "subscriber_types": [{"name": "driver"}]})

        assert updated.updated_at.year > 2020

    def test_missing_subscriber(self, service):
        with pytest.raises(NotFoundError):
            service.update_subscriber(999, {"email": "a@example.com", "name": "A"})


class TestDelete:

    def test_delete_removes_subscriber_and_types(self, service):
        created = service.create_subscriber({
            "email": "jane@example.com",
            "name": "Jane",
            "subscriber_types": [{"name": "champion"}],
        })

        service.delete_subscriber(created.id)

        with pytest.raises(NotFoundError):
            service.get_subscriber(created.id)
        assert type_rows() == 0

    def test_delete_missing(self, service):
        with pytest.raises(NotFoundError):
            service.delete_subscriber(999)


def test_column_enum_matches_request_enum():
    column_enums = SubscriberType.__table__.c.name.type.enums

    assert list(SUBSCRIBER_TYPE_NAMES) == [t.value for t in SubscriberTypeName]
    assert list(column_enums) == list(SUBSCRIBER_TYPE_NAMES)
