# -*- coding: utf-8 -*-
"""
Subscriber aggregate service.

Every write validates its input first and commits the subscriber together
with its types in a single transaction, so a rejected or failed request
never leaves a partial aggregate behind.
"""
from datetime import datetime, timezone
from typing import Any, List, Mapping

from sqlalchemy.exc import SQLAlchemyError

from mylo_api.errors import DependencyError, NotFoundError
from mylo_api.models import Subscriber, SubscriberType
from mylo_api.schemas import SubscriberRequest, parse_body
from mylo_api.services.structured_logging import get_logger

logger = get_logger('mylo.subscribers')

# subscribers.id is a 32-bit serial
MAX_SUBSCRIBER_ID = 2 ** 31 - 1


class SubscriberService:
    """CRUD over the subscriber aggregate on a given SQLAlchemy session."""

    def __init__(self, session):
        self.session = session

    def list_subscribers(self) -> List[Subscriber]:
        try:
            return self.session.query(Subscriber).order_by(Subscriber.id).all()
        except SQLAlchemyError as e:
            logger.exception("Failed to list subscribers")
            raise DependencyError('Could not retrieve subscribers') from e

    def get_subscriber(self, subscriber_id: int) -> Subscriber:
        if not 0 < subscriber_id <= MAX_SUBSCRIBER_ID:
            raise NotFoundError('Subscriber not found')
        try:
            subscriber = self.session.get(Subscriber, subscriber_id)
        except SQLAlchemyError as e:
            logger.exception("Failed to load subscriber", subscriber_id=subscriber_id)
            raise DependencyError('Could not retrieve subscriber') from e
        if subscriber is None:
            raise NotFoundError('Subscriber not found')
        return subscriber

    def create_subscriber(self, data: Mapping[str, Any]) -> Subscriber:
        payload = parse_body(SubscriberRequest, data)

        subscriber = Subscriber(email=payload.email, name=payload.name)
        subscriber.subscriber_types = [
            SubscriberType(name=name) for name in payload.type_names or []
        ]
        self.session.add(subscriber)
        self._commit('Could not create subscriber')

        logger.info("Subscriber created", subscriber_id=subscriber.id,
                    type_count=len(subscriber.subscriber_types))
        return subscriber

    def update_subscriber(self, subscriber_id: int, data: Mapping[str, Any]) -> Subscriber:
        """
        Overwrite email and name; replace types only when the field is sent.

        ``subscriber_types`` absent or null keeps the current types, ``[]``
        removes them all, any other list replaces them.
        """
        subscriber = self.get_subscriber(subscriber_id)
        payload = parse_body(SubscriberRequest, data)

        subscriber.email = payload.email
        subscriber.name = payload.name

        type_names = payload.type_names
        if type_names is not None:
            # delete-orphan drops the previous rows in the same flush
            subscriber.subscriber_types = [SubscriberType(name=name) for name in type_names]
            # onupdate only fires for parent column changes
            subscriber.updated_at = datetime.now(timezone.utc)

        self._commit('Could not update subscriber')
        logger.info("Subscriber updated", subscriber_id=subscriber.id,
                    types_replaced=type_names is not None)
        return subscriber

    def delete_subscriber(self, subscriber_id: int) -> None:
        subscriber = self.get_subscriber(subscriber_id)
        # The cascade issues the subscriber_types DELETE before the parent's.
        self.session.delete(subscriber)
        self._commit('Could not delete subscriber')
        logger.info("Subscriber deleted", subscriber_id=subscriber_id)

    def _commit(self, message: str) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.exception(message)
            raise DependencyError(message) from e
