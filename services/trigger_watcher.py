import logging

from functions.trigger_functions import (
    on_bulletin_post_created, on_payment_approved, on_payment_status_changed,
    on_payment_submitted, on_referral_created, on_support_ticket_created,
    on_support_ticket_updated, on_user_created
)

logger = logging.getLogger(__name__)


# Only these fields are read from ``before`` by the update triggers
TRACKED_FIELDS = ('status', 'adminReply')


def _tracked(data):
    return {field: data[field] for field in TRACKED_FIELDS if field in data}


class CollectionTrigger:
    """Turns Firestore snapshot changes on one collection into create/update calls.

    The first snapshot only primes the last-seen state; later ADDED changes are
    creations and MODIFIED changes are updates with ``(before, after)`` data.
    ``before`` holds only TRACKED_FIELDS. Redelivered changes are dispatched
    again. A failing handler only loses its own change.
    """

    def __init__(self, collection, on_created=None, on_updated=None):
        self.collection = collection
        self.on_created = on_created
        self.on_updated = on_updated
        self.primed = False
        self.last_seen = {}

    def handle(self, changes):
        if not self.primed:
            for change in changes:
                self.last_seen[change.document.id] = _tracked(change.document.to_dict() or {})
            self.primed = True
            logger.info("Watching %s (%d existing documents)", self.collection, len(self.last_seen))
            return

        for change in changes:
            try:
                self.dispatch(change)
            except Exception:
                logger.exception("Error dispatching %s/%s", self.collection, change.document.id)

    def dispatch(self, change):
        doc_id = change.document.id
        kind = change.type.name
        if kind == 'REMOVED':
            self.last_seen.pop(doc_id, None)
            return
        data = change.document.to_dict() or {}
        before = self.last_seen.get(doc_id)
        self.last_seen[doc_id] = _tracked(data)
        if kind == 'ADDED' and self.on_created:
            self.on_created(doc_id, data)
        elif kind == 'MODIFIED' and self.on_updated:
            self.on_updated(doc_id, before or {}, data)

    def __call__(self, col_snapshot, changes, read_time):
        try:
            self.handle(changes)
        except Exception:
            logger.exception("Error dispatching %s changes", self.collection)


class TriggerWatcher:
    def __init__(self, db, service, mailer):
        self.db = db
        self.service = service
        self.mailer = mailer
        self.watches = []

    def triggers(self):
        service, mailer = self.service, self.mailer

        def payment_updated(payment_id, before, after):
            on_payment_status_changed(service, payment_id, before, after)
            on_payment_approved(service, mailer, payment_id, before, after)

        return [
            CollectionTrigger(
                'payments',
                on_created=lambda doc_id, data: on_payment_submitted(service, doc_id, data),
                on_updated=payment_updated
            ),
            CollectionTrigger(
                'supportTickets',
                on_created=lambda doc_id, data: on_support_ticket_created(service, doc_id, data),
                on_updated=lambda doc_id, before, after: on_support_ticket_updated(service, doc_id, before, after)
            ),
            CollectionTrigger(
                'bulletinPosts',
                on_created=lambda doc_id, data: on_bulletin_post_created(service, doc_id, data)
            ),
            CollectionTrigger(
                'referrals',
                on_created=lambda doc_id, data: on_referral_created(service, doc_id, data)
            ),
            CollectionTrigger(
                'users',
                on_created=lambda doc_id, data: on_user_created(service, doc_id, data)
            )
        ]

    def start(self):
        for trigger in self.triggers():
            self.watches.append(self.db.collection(trigger.collection).on_snapshot(trigger))
        return self.watches

    def stop(self):
        for watch in self.watches:
            watch.unsubscribe()
        self.watches = []
