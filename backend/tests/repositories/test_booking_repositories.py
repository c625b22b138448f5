from datetime import date

from venue_booking.core.enums import ApprovalStatus, BookingStatus, EventStatus, PayerKind
from venue_booking.models import BookingDate
from venue_booking.models.types import new_ulid
from venue_booking.repositories import RepositoryFactory
from venue_booking.repositories.event_repository import OrganizerRef

DAY = date(2025, 6, 10)


class TestBookingRepository:
    def test_get_booking_with_details_loads_relations(self, db, venue_factory, event_factory, booking_factory):
        venue = venue_factory()
        event = event_factory()
        booking = booking_factory(venue, [DAY], event=event, hours=[10])
        db.expunge_all()

        loaded = RepositoryFactory.create_booking_repository(db).get_booking_with_details(
            booking.id, for_update=True
        )

        assert loaded.venue.condition.deposit_required_percent == 30
        assert loaded.event.id == event.id
        assert [d.date for d in loaded.booking_dates] == [DAY]

    def test_get_booking_with_details_missing(self, db):
        assert RepositoryFactory.create_booking_repository(db).get_booking_with_details(new_ulid()) is None

    def test_bookings_in_range_match_on_booking_dates(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        # Range covers the 10th but the booking only uses the 8th and the 12th
        gap = booking_factory(venue, [date(2025, 6, 8), date(2025, 6, 12)], hours=[10])
        inside = booking_factory(venue, [DAY], hours=[10])
        booking_factory(venue, [DAY], hours=[11], booking_status=BookingStatus.CANCELLED)

        repo = RepositoryFactory.create_booking_repository(db)

        assert [b.id for b in repo.get_bookings_in_range(venue.id, DAY, DAY)] == [inside.id]
        assert {b.id for b in repo.get_bookings_in_range(venue.id, date(2025, 6, 8), DAY)} == {gap.id, inside.id}

    def test_colliding_siblings_exclude_self_and_paid(self, db, venue_factory, booking_factory, approved_booking_factory):
        venue = venue_factory()
        target = booking_factory(venue, [DAY], hours=[10])
        pending = booking_factory(venue, [DAY], hours=[12])
        approved_booking_factory(venue, [DAY], hours=[14], booking_status=BookingStatus.APPROVED_PAID)

        siblings = RepositoryFactory.create_booking_repository(db).get_colliding_siblings(venue.id, DAY, target.id)

        assert [s.id for s in siblings] == [pending.id]

    def test_replace_dates_deletes_orphans(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        booking = booking_factory(venue, [DAY, date(2025, 6, 11)], hours=[10])
        repo = RepositoryFactory.create_booking_repository(db)

        repo.replace_dates(booking, [BookingDate(date=date(2025, 7, 1), hours=[9])])
        db.commit()

        assert db.query(BookingDate).count() == 1


class TestConflictCheckerRepository:
    def test_find_duplicate_treats_missing_times_as_equal(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        whole_day = booking_factory(venue, [DAY])
        repo = RepositoryFactory.create_conflict_checker_repository(db)

        assert repo.find_duplicate(venue.id, None, DAY, None, None).id == whole_day.id
        assert repo.find_duplicate(venue.id, None, DAY, "10:00", "11:00") is None

    def test_find_duplicate_skips_excluded_booking(self, db, venue_factory, booking_factory):
        venue = venue_factory()
        own = booking_factory(venue, [DAY], start_time="10:00", end_time="12:00")
        other = booking_factory(venue, [DAY], start_time="10:00", end_time="12:00")
        repo = RepositoryFactory.create_conflict_checker_repository(db)

        assert repo.find_duplicate(venue.id, None, DAY, "10:00", "12:00", exclude_booking_id=own.id).id == other.id
        assert repo.find_duplicate(venue.id, None, DAY, "10:00", "12:00", exclude_booking_id=other.id).id == own.id

    def test_approved_overlapping_excludes_given_booking(self, db, venue_factory, approved_booking_factory):
        venue = venue_factory()
        first = approved_booking_factory(venue, [DAY], hours=[10])
        second = approved_booking_factory(venue, [DAY], hours=[12])
        repo = RepositoryFactory.create_conflict_checker_repository(db)

        found = repo.get_approved_overlapping(venue.id, DAY, DAY, exclude_booking_id=first.id)

        assert [b.id for b in found] == [second.id]

    def test_pending_in_range_keeps_bookings_without_event(
        self, db, venue_factory, event_factory, booking_factory, approved_booking_factory
    ):
        venue = venue_factory()
        event = event_factory()
        own = booking_factory(venue, [DAY], event=event, hours=[8])
        loose = booking_factory(venue, [DAY], hours=[10])
        approved_booking_factory(venue, [DAY], hours=[12])
        booking_factory(venue, [DAY], hours=[14], approval_status=ApprovalStatus.REJECTED)
        repo = RepositoryFactory.create_conflict_checker_repository(db)

        found = repo.get_pending_in_range(venue.id, DAY, DAY, exclude_event_id=event.id)

        assert [b.id for b in found] == [loose.id]
        assert own.id not in [b.id for b in found]

    def test_count_approved_event_bookings(self, db, venue_factory, event_factory, approved_booking_factory):
        venue = venue_factory()
        approved_event = event_factory(status=EventStatus.APPROVED)
        pending_event = event_factory(status=EventStatus.PENDING)
        approved_booking_factory(venue, [DAY], event=approved_event, hours=[10])
        approved_booking_factory(venue, [DAY], event=pending_event, hours=[14])
        repo = RepositoryFactory.create_conflict_checker_repository(db)

        assert repo.count_approved_event_bookings(venue.id, DAY, DAY) == 1
        assert repo.count_approved_event_bookings(venue.id, DAY, DAY, exclude_event_id=approved_event.id) == 0


class TestEventRepository:
    def test_resolve_organizer_prefers_organization(self, db, event_factory):
        org_id = new_ulid()
        event = event_factory(organizer_organization_id=org_id)

        assert RepositoryFactory.create_event_repository(db).resolve_organizer(event.id) == OrganizerRef(
            org_id, PayerKind.ORGANIZATION
        )

    def test_resolve_organizer_falls_back_to_user(self, db, event_factory):
        event = event_factory()

        ref = RepositoryFactory.create_event_repository(db).resolve_organizer(event.id)

        assert ref == OrganizerRef(event.organizer_user_id, PayerKind.USER)

    def test_resolve_organizer_unknown(self, db, event_factory):
        repo = RepositoryFactory.create_event_repository(db)

        assert repo.resolve_organizer(new_ulid()) is None
        assert repo.resolve_organizer(event_factory(organizer_user_id=None).id) is None

    def test_event_venue_ids_skip_cancelled(self, db, venue_factory, event_factory, booking_factory):
        event = event_factory()
        live_venue = venue_factory()
        booking_factory(live_venue, [DAY], event=event, hours=[10])
        booking_factory(live_venue, [date(2025, 6, 11)], event=event, hours=[10])
        booking_factory(venue_factory(), [DAY], event=event, hours=[10], booking_status=BookingStatus.CANCELLED)

        assert RepositoryFactory.create_event_repository(db).get_event_venue_ids(event.id) == [live_venue.id]

    def test_window(self, db, event_factory):
        event = event_factory(start_date=DAY, start_time="10:00", end_time="12:00")

        assert RepositoryFactory.create_event_repository(db).get_window(event.id) == (DAY, DAY, "10:00", "12:00")
