from datetime import date, timedelta

from sqlalchemy.exc import SQLAlchemyError

from fitchallenge.models import Challenge, ChallengeParticipant, ExerciseLog
from fitchallenge.services import challenges as challenge_service

from conftest import flashes, login


def _form(**overrides):
    data = {
        "title": "October steps",
        "description": "Walk every day",
        "start_date": date.today().isoformat(),
        "end_date": (date.today() + timedelta(days=30)).isoformat(),
        "goal_count": "20",
        "group_goal": "",
        "prize": "Pizza",
        "penalty": "",
    }
    data.update(overrides)
    return data


# =========================================================
# Creation
# =========================================================

def test_create_challenge_enrols_creator(make_user, login_as):
    ana = make_user("Ana")
    client = login_as(ana)

    response = client.post("/challenges/new", data=_form())

    challenge = Challenge.query.one()
    assert response.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert challenge.creator_id == ana.id
    assert challenge.status == "active"
    assert challenge.goal_count == 20
    assert challenge.group_goal is None
    assert challenge.prize == "Pizza"
    assert challenge.penalty is None
    assert challenge.invite_code
    assert challenge_service.is_participant(ana.id, challenge.id)


def test_create_challenge_requires_description_dates_and_goal(make_user, login_as):
    client = login_as(make_user("Ana"))

    response = client.post("/challenges/new", data=_form(goal_count=""))

    assert response.headers["Location"].endswith("/challenges/new")
    assert Challenge.query.count() == 0
    assert ("error", "Description, dates and goal are required.") in flashes(client)


def test_create_challenge_rejects_end_before_start(make_user, login_as):
    client = login_as(make_user("Ana"))

    client.post("/challenges/new", data=_form(
        start_date="2026-05-10",
        end_date="2026-05-01",
    ))

    assert Challenge.query.count() == 0
    assert ("error", "End date must be on or after the start date.") in flashes(client)


def test_create_challenge_rejects_non_positive_goal(make_user, login_as):
    client = login_as(make_user("Ana"))

    client.post("/challenges/new", data=_form(goal_count="0"))

    assert Challenge.query.count() == 0


def test_invite_codes_are_unique(make_user, make_challenge):
    ana = make_user("Ana")
    codes = {make_challenge(ana, title=f"C{i}").invite_code for i in range(5)}
    assert len(codes) == 5


# =========================================================
# Viewing
# =========================================================

def test_participant_sees_leaderboard(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    challenge = make_challenge(ana)
    challenge_service.join_challenge(bruno, challenge)
    challenge_service.log_activity(bruno, challenge, "Cycling")

    response = login_as(bruno).get(f"/challenges/{challenge.id}")

    assert response.status_code == 200
    assert b"Leaderboard" in response.data
    assert b"Cycling" in response.data
    assert challenge.invite_code.encode() in response.data


def test_outsider_cannot_view_challenge(make_user, make_challenge, login_as):
    challenge = make_challenge(make_user("Ana"))
    client = login_as(make_user("Eve"))

    response = client.get(f"/challenges/{challenge.id}")

    assert response.headers["Location"].endswith("/dashboard")
    assert ("error", "Only participants can view this challenge.") in flashes(client)


def test_missing_challenge_redirects_to_dashboard(make_user, login_as):
    client = login_as(make_user("Ana"))

    response = client.get("/challenges/999")

    assert response.headers["Location"].endswith("/dashboard")
    assert ("error", "Challenge not found.") in flashes(client)


def test_view_backfills_missing_invite_code(make_user, make_challenge, login_as, db):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    challenge.invite_code = None
    db.session.commit()

    login_as(ana).get(f"/challenges/{challenge.id}")
    code = db.session.get(Challenge, challenge.id).invite_code
    assert code

    login_as(ana).get(f"/challenges/{challenge.id}")
    assert db.session.get(Challenge, challenge.id).invite_code == code


# =========================================================
# Joining
# =========================================================

def test_join_by_invite_code_is_idempotent(make_user, make_challenge, login_as):
    challenge = make_challenge(make_user("Ana"))
    bruno = make_user("Bruno")
    client = login_as(bruno)

    first = client.post("/challenges/join", data={"invite_code": challenge.invite_code.lower()})
    second = client.post("/challenges/join", data={"invite_code": challenge.invite_code})

    assert first.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert second.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert ChallengeParticipant.query.filter_by(user_id=bruno.id, challenge_id=challenge.id).count() == 1
    assert ("info", "You already take part in this challenge.") in flashes(client)


def test_join_with_unknown_code(make_user, login_as):
    client = login_as(make_user("Bruno"))

    response = client.post("/challenges/join", data={"invite_code": "NOPE"})

    assert response.headers["Location"].endswith("/dashboard")
    assert ("error", "Invalid invite code.") in flashes(client)


def test_invite_link_joins_logged_in_user(make_user, make_challenge, login_as):
    challenge = make_challenge(make_user("Ana"))
    bruno = make_user("Bruno")

    response = login_as(bruno).get(f"/invite/{challenge.invite_code}")

    assert response.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert challenge_service.is_participant(bruno.id, challenge.id)


def test_invite_link_waits_for_login(client, make_user, make_challenge):
    challenge = make_challenge(make_user("Ana"))
    bruno = make_user("Bruno")

    response = client.get(f"/invite/{challenge.invite_code}")
    assert response.headers["Location"].endswith("/login")
    assert not challenge_service.is_participant(bruno.id, challenge.id)

    response = login(client, bruno.email)

    assert response.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert challenge_service.is_participant(bruno.id, challenge.id)


def test_closed_challenge_rejects_join(make_user, make_challenge, login_as, db):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    challenge_service.close_challenge(ana, challenge)
    bruno = make_user("Bruno")
    client = login_as(bruno)

    client.post("/challenges/join", data={"invite_code": challenge.invite_code})

    assert not challenge_service.is_participant(bruno.id, challenge.id)
    assert ("error", "This challenge is closed.") in flashes(client)


def test_owner_adds_participant_by_email(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    challenge = make_challenge(ana)
    client = login_as(ana)

    client.post(f"/challenges/{challenge.id}/participants", data={"email": "BRUNO@example.com"})
    client.post(f"/challenges/{challenge.id}/participants", data={"email": "bruno@example.com"})

    assert ChallengeParticipant.query.filter_by(user_id=bruno.id, challenge_id=challenge.id).count() == 1


def test_only_owner_adds_participants(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    carla = make_user("Carla")
    challenge = make_challenge(ana)
    challenge_service.join_challenge(bruno, challenge)
    client = login_as(bruno)

    client.post(f"/challenges/{challenge.id}/participants", data={"email": carla.email})

    assert not challenge_service.is_participant(carla.id, challenge.id)
    assert ("error", "Only the creator can add participants to this challenge.") in flashes(client)


def test_add_unknown_participant(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    client = login_as(ana)

    client.post(f"/challenges/{challenge.id}/participants", data={"email": "ghost@example.com"})

    assert ("error", "No user registered with this email.") in flashes(client)


# =========================================================
# Logging
# =========================================================

def test_participant_logs_activity(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    client = login_as(ana)

    client.post(f"/challenges/{challenge.id}/log", data={"activity": "Yoga", "logged_on": "2026-10-01"})
    client.post(f"/challenges/{challenge.id}/log", data={"activity": "Run"})

    logs = ExerciseLog.query.filter_by(user_id=ana.id, challenge_id=challenge.id).order_by(ExerciseLog.id).all()
    assert [log.activity for log in logs] == ["Yoga", "Run"]
    assert [log.count for log in logs] == [1, 1]
    assert logs[0].logged_on == date(2026, 10, 1)
    assert logs[1].logged_on == date.today()


def test_log_requires_activity(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    client = login_as(ana)

    client.post(f"/challenges/{challenge.id}/log", data={"activity": "   "})

    assert ExerciseLog.query.count() == 0
    assert ("error", "Enter the type of exercise.") in flashes(client)


def test_outsider_cannot_log(make_user, make_challenge, login_as):
    challenge = make_challenge(make_user("Ana"))
    eve = make_user("Eve")
    client = login_as(eve)

    client.post(f"/challenges/{challenge.id}/log", data={"activity": "Run"})

    assert ExerciseLog.query.count() == 0
    assert ("error", "Join the challenge before logging activities.") in flashes(client)


def test_closed_challenge_rejects_logs(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    challenge_service.close_challenge(ana, challenge)
    client = login_as(ana)

    client.post(f"/challenges/{challenge.id}/log", data={"activity": "Run"})

    assert ExerciseLog.query.count() == 0
    assert ("error", "This challenge is closed.") in flashes(client)


def test_quick_log_fans_out_to_active_challenges(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    first = make_challenge(ana, title="First")
    second = make_challenge(bruno, title="Second")
    closed = make_challenge(bruno, title="Closed")
    not_joined = make_challenge(bruno, title="Not joined")
    challenge_service.join_challenge(ana, second)
    challenge_service.join_challenge(ana, closed)
    challenge_service.close_challenge(bruno, closed)
    client = login_as(ana)

    client.post("/dashboard/log", data={"activity": "Swim"})

    logged = {log.challenge_id for log in ExerciseLog.query.filter_by(user_id=ana.id)}
    assert logged == {first.id, second.id}
    assert closed.id not in logged and not_joined.id not in logged
    assert ("success", "Activity logged in 2 challenge(s)!") in flashes(client)


def test_quick_log_without_challenges(make_user, login_as):
    client = login_as(make_user("Ana"))

    client.post("/dashboard/log", data={"activity": "Swim"})

    assert ExerciseLog.query.count() == 0
    assert ("error", "Join a challenge before logging activities.") in flashes(client)


# =========================================================
# Owner actions
# =========================================================

def test_only_creator_closes(make_user, make_challenge, login_as, db):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    challenge = make_challenge(ana)
    challenge_service.join_challenge(bruno, challenge)

    login_as(bruno).post(f"/challenges/{challenge.id}/close")
    assert db.session.get(Challenge, challenge.id).status == "active"

    login_as(ana).post(f"/challenges/{challenge.id}/close")
    assert db.session.get(Challenge, challenge.id).status == "closed"


def test_only_creator_deletes(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    challenge = make_challenge(ana)
    challenge_service.join_challenge(bruno, challenge)
    client = login_as(bruno)

    client.post(f"/challenges/{challenge.id}/delete")

    assert Challenge.query.count() == 1
    assert ("error", "Only the creator can delete this challenge.") in flashes(client)


def test_delete_cascades_participants_and_logs(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    challenge = make_challenge(ana)
    keep = make_challenge(bruno, title="Keep")
    challenge_service.join_challenge(bruno, challenge)
    challenge_service.log_activity(bruno, challenge, "Run")
    challenge_service.log_activity(ana, challenge, "Run")
    challenge_service.log_activity(bruno, keep, "Run")

    response = login_as(ana).post(f"/challenges/{challenge.id}/delete")

    assert response.headers["Location"].endswith("/dashboard")
    assert [c.id for c in Challenge.query.all()] == [keep.id]
    assert ChallengeParticipant.query.filter_by(challenge_id=challenge.id).count() == 0
    assert ExerciseLog.query.filter_by(challenge_id=challenge.id).count() == 0
    assert ExerciseLog.query.filter_by(challenge_id=keep.id).count() == 1


# =========================================================
# Dashboard
# =========================================================

def test_dashboard_lists_own_and_joined_challenges(make_user, make_challenge, login_as):
    ana = make_user("Ana")
    bruno = make_user("Bruno")
    make_challenge(ana, title="Ana's plank")
    joined = make_challenge(bruno, title="Bruno squats")
    make_challenge(bruno, title="Hidden sprint")
    challenge_service.join_challenge(ana, joined)

    response = login_as(ana).get("/dashboard")

    assert response.status_code == 200
    assert b"Bruno squats" in response.data
    assert b"plank" in response.data
    assert b"Hidden sprint" not in response.data


def test_delete_failure_is_logged_with_arguments(make_user, make_challenge, login_as, monkeypatch, caplog):
    ana = make_user("Ana")
    challenge = make_challenge(ana)
    client = login_as(ana)

    def fail(user, challenge):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(challenge_service, "delete_challenge", fail)
    response = client.post(f"/challenges/{challenge.id}/delete")

    assert response.headers["Location"].endswith(f"/challenges/{challenge.id}")
    assert ("error", "Could not delete the challenge. Please try again.") in flashes(client)
    [record] = [r for r in caplog.records if r.levelname == "ERROR"]
    assert record.msg == "Error deleting challenge %s: %s"
    assert record.args[0] == challenge.id
