import asyncio
import sqlite3
from datetime import date, timedelta

import pytest

from pet_rescue_api.app.core.config import settings
from pet_rescue_api.app.core.db import WriteStatus
from pet_rescue_api.app.core.exceptions import (
    AccountLockedError,
    DuplicateError,
    NotFoundError,
)
from pet_rescue_api.app.schemas.client import ClientCreate, ClientSortOrder, ClientUpdate
from pet_rescue_api.app.schemas.foster import FosterAdminCreate, FosterUpdate
from pet_rescue_api.app.schemas.pet import PetSortOrder, PetUpdate
from pet_rescue_api.app.schemas.user import UserCreate, UserRole, UserSelfUpdate
from pet_rescue_api.app.services.client_service import ClientService
from pet_rescue_api.app.services.foster_service import FosterService
from pet_rescue_api.app.services.pet_service import PetService
from pet_rescue_api.app.services.statistics_service import StatisticsService
from pet_rescue_api.app.services.user_service import UserService

from ..factories import PASSWORD, make_client, make_pet


def run(coro):
    return asyncio.run(coro)


def foster(client_id, pet_id, start, end=None, description=None):
    return FosterAdminCreate(
        client_id=client_id,
        pet_id=pet_id,
        start_date=start,
        end_date=end,
        description=description,
    )


# --- Pets ---


def test_pet_filters_and_search():
    make_pet("Rex", "Dog", "M", 5, "Loves long walks")
    make_pet("Tom", "Cat", "M", 2)
    make_pet("Luna", "Cat", "F", None, "Black cat, walks on leash")

    cats = run(PetService.list_pets(species="Cat"))
    assert [p.name for p in cats.items] == ["Tom", "Luna"]

    walkers = run(PetService.list_pets(search_string="WALKS"))
    assert {p.name for p in walkers.items} == {"Rex", "Luna"}

    adults = run(PetService.list_pets(age_gte=3))
    assert [p.name for p in adults.items] == ["Rex"]

    young_males = run(PetService.list_pets(gender="M", age_lte=4))
    assert [p.name for p in young_males.items] == ["Tom"]


def test_pet_sort_desc_reverses_asc():
    for name in ["Bella", "Alfie", "Bella", "Coco", "Alfie"]:
        make_pet(name)
    asc = run(PetService.list_pets(sort_order=PetSortOrder.NAME_ASC, page_size=10))
    desc = run(PetService.list_pets(sort_order=PetSortOrder.NAME_DESC, page_size=10))
    assert [p.id for p in desc.items] == [p.id for p in reversed(asc.items)]
    assert [p.name for p in asc.items] == ["Alfie", "Alfie", "Bella", "Bella", "Coco"]


def test_pet_sort_by_species_uses_enum_order():
    for species in ["Bird", "Cat", "Dog"]:
        make_pet(species=species)
    asc = run(PetService.list_pets(sort_order=PetSortOrder.SPECIES_ASC))
    desc = run(PetService.list_pets(sort_order=PetSortOrder.SPECIES_DESC))
    assert [p.species for p in asc.items] == ["Cat", "Dog", "Bird"]
    assert [p.species for p in desc.items] == ["Bird", "Dog", "Cat"]


def test_pet_sort_by_gender_puts_males_first():
    make_pet("Luna", gender="F")
    make_pet("Max", gender="M")
    asc = run(PetService.list_pets(sort_order=PetSortOrder.GENDER_ASC))
    assert [p.gender for p in asc.items] == ["M", "F"]


def test_pet_paging_metadata():
    for i in range(8):
        make_pet(f"Pet {i}")
    page = run(PetService.list_pets(page_number=2, page_size=6))
    assert len(page.items) == 2
    assert page.total_count == 8
    assert page.total_pages == 2
    assert page.has_previous_page and not page.has_next_page


def test_get_missing_pet():
    with pytest.raises(NotFoundError):
        run(PetService.get_pet(404))


def test_update_pet_with_stale_version_conflicts():
    pet = make_pet("Rex", "Dog", "M")
    changes = dict(name="Rex II", species="Dog", gender="M", version=pet.version)
    first = run(PetService.update_pet(pet.id, PetUpdate(**changes)))
    assert first.status == WriteStatus.OK
    assert first.record.version == pet.version + 1

    second = run(PetService.update_pet(pet.id, PetUpdate(**changes)))
    assert second.status == WriteStatus.CONFLICT
    assert run(PetService.get_pet(pet.id)).name == "Rex II"


def test_update_missing_pet():
    result = run(PetService.update_pet(99, PetUpdate(name="Ghost", species="Cat", gender="F")))
    assert result.status == WriteStatus.NOT_FOUND


def test_deleting_pet_keeps_fosters_and_clears_reference():
    pet = make_pet()
    client = make_client()
    created = run(FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1))))
    run(PetService.delete_pet(pet.id))

    kept = run(FosterService.get_foster(created.record.id))
    assert kept.pet_id is None
    assert kept.pet_info is None
    assert kept.client_id == client.id

    with pytest.raises(NotFoundError):
        run(PetService.delete_pet(pet.id))


# --- Clients ---


def test_client_search_matches_linked_user_email_and_id():
    user = run(UserService.create_user(UserCreate(email="owner@example.com")))
    linked = make_client("Linked Person", user_id=user.id)
    make_client("Other Person", address="Main street")

    by_email = run(ClientService.list_clients(search_string="OWNER@"))
    assert [c.id for c in by_email.items] == [linked.id]
    assert by_email.items[0].user_info.email == "owner@example.com"

    by_id = run(ClientService.list_clients(search_string=user.id))
    assert [c.id for c in by_id.items] == [linked.id]

    without_user = run(ClientService.list_clients(has_user=False))
    assert [c.name for c in without_user.items] == ["Other Person"]


def test_client_sort_by_user_email():
    a = run(UserService.create_user(UserCreate(email="a@example.com")))
    b = run(UserService.create_user(UserCreate(email="b@example.com")))
    make_client("Second", user_id=b.id)
    make_client("First", user_id=a.id)
    page = run(ClientService.list_clients(sort_order=ClientSortOrder.USER_ASC))
    assert [c.name for c in page.items] == ["First", "Second"]


def test_client_with_unknown_user_is_rejected():
    result = run(ClientService.create_client(ClientCreate(name="Nobody", user_id="missing")))
    assert result.status == WriteStatus.REJECTED


def test_update_client_bumps_version():
    client = make_client()
    result = run(
        ClientService.update_client(
            client.id, ClientUpdate(name="New Name", version=client.version)
        )
    )
    assert result.ok
    assert result.record.name == "New Name"
    assert result.record.version == client.version + 1


def test_deleting_client_clears_foster_reference():
    pet = make_pet()
    client = make_client()
    created = run(FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1))))
    run(ClientService.delete_client(client.id))
    assert run(FosterService.get_foster(created.record.id)).client_id is None


def test_get_client_for_user_id():
    user = run(UserService.signup("signup@example.com", PASSWORD))
    client = run(ClientService.get_client_for_user_id(user.id))
    assert client is not None
    assert client.name == "signup@example.com"
    assert run(ClientService.get_client_for_user_id("unknown")) is None


# --- Fosters ---


def test_foster_validation_blocks_overlap():
    pet = make_pet()
    client = make_client()
    first = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1), date(2024, 1, 20)))
    )
    assert first.ok

    overlap = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 15), date(2024, 2, 1)))
    )
    assert overlap.status == WriteStatus.REJECTED
    assert overlap.reason == "Conflicting Foster interval for the same Pet."

    adjacent = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 20), date(2024, 2, 10)))
    )
    assert adjacent.ok
    assert run(FosterService.list_fosters(pet_id=pet.id)).total_count == 2


def test_foster_for_other_pet_does_not_conflict():
    dog, cat = make_pet("Rex", "Dog", "M"), make_pet()
    client = make_client()
    assert run(FosterService.create_foster(foster(client.id, dog.id, date(2024, 1, 1)))).ok
    assert run(FosterService.create_foster(foster(client.id, cat.id, date(2024, 1, 1)))).ok


def test_foster_with_unknown_pet():
    client = make_client()
    with pytest.raises(NotFoundError):
        run(FosterService.create_foster(foster(client.id, 123, date(2024, 1, 1))))


def test_update_foster_excludes_itself():
    pet = make_pet()
    client = make_client()
    created = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1), date(2024, 1, 20)))
    ).record
    result = run(
        FosterService.update_foster(
            created.id,
            FosterUpdate(
                client_id=client.id,
                pet_id=pet.id,
                start_date=date(2024, 1, 1),
                end_date=date(2024, 2, 1),
                version=created.version,
            ),
        )
    )
    assert result.ok
    assert result.record.end_date == date(2024, 2, 1)


def test_update_foster_rejection_leaves_record_unchanged():
    pet = make_pet()
    client = make_client()
    created = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1), date(2024, 1, 20)))
    ).record
    result = run(
        FosterService.update_foster(
            created.id,
            FosterUpdate(
                client_id=client.id,
                pet_id=pet.id,
                start_date=date(2024, 1, 1),
                end_date=date(2024, 1, 5),
            ),
        )
    )
    assert result.status == WriteStatus.REJECTED
    assert run(FosterService.get_foster(created.id)).end_date == date(2024, 1, 20)


def test_foster_date_filters_and_search():
    pet = make_pet("Rex", "Dog", "M")
    client = make_client("Anna Smith")
    run(FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1), date(2024, 2, 1))))
    run(FosterService.create_foster(foster(client.id, pet.id, date(2024, 3, 1))))

    started_in_march = run(FosterService.list_fosters(start_date_gte=date(2024, 3, 1)))
    assert [f.end_date for f in started_in_march.items] == [None]

    ended_before = run(FosterService.list_fosters(end_date_lt=date(2024, 3, 1)))
    assert [f.start_date for f in ended_before.items] == [date(2024, 1, 1)]

    by_client_name = run(FosterService.list_fosters(search_string="anna"))
    assert by_client_name.total_count == 2
    assert by_client_name.items[0].client_name == "Anna Smith"
    assert by_client_name.items[0].pet_info.name == "Rex"


def test_active_foster_for_pet():
    pet = make_pet()
    client = make_client()
    today = date.today()
    run(
        FosterService.create_foster(
            foster(client.id, pet.id, today - timedelta(days=60), today - timedelta(days=30))
        )
    )
    assert run(FosterService.get_active_foster_for_pet(pet.id)) is None

    current = run(
        FosterService.create_foster(foster(client.id, pet.id, today - timedelta(days=5)))
    ).record
    assert run(FosterService.get_active_foster_for_pet(pet.id)).id == current.id
    assert len(run(FosterService.get_foster_for_pet(pet.id))) == 2


def test_get_foster_owned_by_other_client():
    pet = make_pet()
    owner, other = make_client("Owner Person"), make_client("Other Person")
    created = run(FosterService.create_foster(foster(owner.id, pet.id, date(2024, 1, 1)))).record
    assert run(FosterService.get_foster(created.id, client_id=owner.id)).id == created.id
    with pytest.raises(NotFoundError):
        run(FosterService.get_foster(created.id, client_id=other.id))


def test_statistics():
    rex, tom = make_pet("Rex", "Dog", "M"), make_pet("Tom")
    make_pet("Idle")
    client = make_client()
    run(FosterService.create_foster(foster(client.id, rex.id, date(2024, 1, 1), date(2024, 1, 21))))
    run(FosterService.create_foster(foster(client.id, rex.id, date(2024, 2, 1), date(2024, 3, 2))))
    run(FosterService.create_foster(foster(client.id, tom.id, date(2024, 1, 1))))

    stats = run(StatisticsService.overview())
    assert stats.nr_of_pets == 3
    assert stats.nr_of_foster == 3
    assert stats.nr_of_fostered_pets == 2
    assert stats.avg_foster_duration == 25.0


# --- Users ---


def test_duplicate_email_is_rejected_case_insensitively():
    run(UserService.create_user(UserCreate(email="dup@example.com")))
    with pytest.raises(DuplicateError):
        run(UserService.create_user(UserCreate(email="DUP@example.com")))


def test_user_search_and_role_filter():
    run(UserService.create_user(UserCreate(email="boss@example.com", role=UserRole.ADMIN)))
    run(UserService.create_user(UserCreate(email="jane@example.com", name="Jane Boss")))
    admins = run(UserService.list_users(role=UserRole.ADMIN))
    assert [u.email for u in admins.items] == ["boss@example.com"]
    assert run(UserService.list_users(search_string="boss")).total_count == 2


def test_deleting_user_unlinks_client():
    user = run(UserService.signup("gone@example.com", PASSWORD))
    client = run(ClientService.get_client_for_user_id(user.id))
    run(UserService.delete_user(user.id))
    kept = run(ClientService.get_client(client.id))
    assert kept.user_id is None
    assert kept.user_info is None


def test_profile_update_keeps_unset_fields():
    user = run(UserService.create_user(UserCreate(email="me@example.com", name="Me", phone="123")))
    result = run(UserService.update_profile(user.id, UserSelfUpdate(name="New Me")))
    assert result.ok
    assert result.record.name == "New Me"
    assert result.record.phone == "123"
    assert result.record.email == "me@example.com"


def test_authenticate():
    run(UserService.create_user(UserCreate(email="login@example.com", password=PASSWORD)))
    assert run(UserService.authenticate("login@example.com", PASSWORD)).email == "login@example.com"
    assert run(UserService.authenticate("login@example.com", "Wr0ngPassword")) is None
    assert run(UserService.authenticate("nobody@example.com", PASSWORD)) is None


def test_lockout_after_repeated_failures(monkeypatch, test_db):
    monkeypatch.setattr(settings, "max_failed_logins", 3)
    run(UserService.create_user(UserCreate(email="lock@example.com", password=PASSWORD)))
    for _ in range(3):
        assert run(UserService.authenticate("lock@example.com", "Wr0ngPassword")) is None

    with pytest.raises(AccountLockedError) as exc_info:
        run(UserService.authenticate("lock@example.com", PASSWORD))
    assert exc_info.value.email == "lock@example.com"
    assert str(exc_info.value).startswith("Account lock@example.com is locked until ")
    assert not isinstance(exc_info.value, ValueError)

    # Once the lockout has expired the correct password works again.
    conn = sqlite3.connect(test_db)
    conn.execute("UPDATE users SET lockout_until = '2000-01-01T00:00:00+00:00'")
    conn.commit()
    conn.close()
    assert run(UserService.authenticate("lock@example.com", PASSWORD)) is not None


def test_successful_login_resets_failure_counter(monkeypatch):
    monkeypatch.setattr(settings, "max_failed_logins", 2)
    run(UserService.create_user(UserCreate(email="reset@example.com", password=PASSWORD)))
    run(UserService.authenticate("reset@example.com", "Wr0ngPassword"))
    run(UserService.authenticate("reset@example.com", PASSWORD))
    run(UserService.authenticate("reset@example.com", "Wr0ngPassword"))
    assert run(UserService.authenticate("reset@example.com", PASSWORD)) is not None


def test_password_reset_flow():
    run(UserService.create_user(UserCreate(email="forgot@example.com", password=PASSWORD)))
    code = run(UserService.forgot_password("forgot@example.com"))
    assert code

    assert not run(UserService.reset_password("forgot@example.com", "bad-code", "N3wPassword"))
    assert run(UserService.reset_password("forgot@example.com", code, "N3wPassword"))
    assert run(UserService.authenticate("forgot@example.com", "N3wPassword")) is not None
    # The code is bound to the old password and cannot be reused.
    assert not run(UserService.reset_password("forgot@example.com", code, "An0therOne"))


def test_password_reset_for_unknown_email_is_silent():
    assert run(UserService.forgot_password("ghost@example.com")) is None
    assert run(UserService.reset_password("ghost@example.com", "whatever", "N3wPassword"))


def test_set_password():
    run(UserService.create_user(UserCreate(email="cli@example.com")))
    assert run(UserService.set_password("cli@example.com", "N3wPassword"))
    assert run(UserService.authenticate("cli@example.com", "N3wPassword")) is not None
    assert not run(UserService.set_password("ghost@example.com", "N3wPassword"))


def test_get_all_fosters_in_id_order():
    pet = make_pet()
    client = make_client()
    later = run(FosterService.create_foster(foster(client.id, pet.id, date(2024, 3, 1)))).record
    earlier = run(
        FosterService.create_foster(foster(client.id, pet.id, date(2024, 1, 1), date(2024, 2, 1)))
    ).record
    assert [f.id for f in run(FosterService.get_all_fosters())] == [later.id, earlier.id]
