"""
Default matching collaborator.

Contract: ``match_tutors_for_request(db, request_id) -> list[dict]`` returning
candidate tutors (tutor_id, full_name, subjects, rating, reviews_count,
next_availabilities). As a side effect it creates ``proposed`` matches and
queues a ``match.proposed`` outbox event for each new one.

Candidates are active tutors teaching the request's subject slug with at least
one availability on a requested slot, most overlapping slots first, then by
average rating. Deployments can plug a different ranking through the
``get_matcher`` dependency.
"""

import logging
from typing import Callable

from sqlalchemy.orm import Session

from backend.app.core.time import utc_now
from backend.app.models.availability import TutorAvailability
from backend.app.models.request import REQUEST_MATCHED, REQUEST_OPEN, TutoringRequest
from backend.app.models.user import ROLE_TUTOR, User
from backend.app.services import matches
from backend.app.services.ratings import tutor_rating_summary
from backend.app.services.slots import Slot, next_occurrence

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 10

Matcher = Callable[[Session, int], list[dict]]


def _teaches(tutor: User, slug: str) -> bool:
    return slug in [str(s).strip().lower() for s in (tutor.subjects or [])]


def match_tutors_for_request(db: Session, request_id: int) -> list[dict]:
    request = db.query(TutoringRequest).filter(TutoringRequest.id == request_id).first()
    if request is None:
        return []
    wanted = {f"{slot['day']}:{slot['pod']}" for slot in (request.slots or [])}

    tutors = db.query(User).filter(User.role == ROLE_TUTOR, User.is_active.is_(True)).all()
    candidates = []
    for tutor in tutors:
        if tutor.id == request.student_id or not _teaches(tutor, request.subject_slug):
            continue
        rows = db.query(TutorAvailability).filter(TutorAvailability.tutor_id == tutor.id).all()
        overlap = [Slot(row.day, row.pod) for row in rows if f"{row.day}:{row.pod}" in wanted]
        if not overlap:
            continue
        rating, reviews = tutor_rating_summary(db, tutor.id)
        candidates.append((tutor, overlap, rating, reviews))

    candidates.sort(key=lambda c: (-len(c[1]), -(c[2] or 0.0), c[0].id))
    candidates = candidates[:MAX_CANDIDATES]

    now = utc_now()
    results = []
    for tutor, overlap, rating, reviews in candidates:
        if matches.find_match(db, request.id, tutor.id) is None:
            matches.create_proposed(db, request.id, tutor.id, request.mode)
        results.append(
            {
                "tutor_id": tutor.id,
                "full_name": tutor.full_name,
                "subjects": list(tutor.subjects or []),
                "rating": rating,
                "reviews_count": reviews,
                "next_availabilities": sorted(next_occurrence(slot, now).isoformat() for slot in overlap),
            }
        )

    if results and request.status == REQUEST_OPEN:
        request.status = REQUEST_MATCHED
        db.commit()
    logger.info(f"Matching for request {request.id}: {len(results)} candidate tutor(s)")
    return results


def get_matcher() -> Matcher:
    return match_tutors_for_request
