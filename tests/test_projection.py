from app.services.projection import Selection, parse_select, parse_sort, public_user, user_summary


def test_parse_sort():
    assert parse_sort("price,-createdAt") == [("price", False), ("createdAt", True)]
    assert parse_sort("-price, price, password") == [("price", True)]
    assert parse_sort(None) == [("createdAt", True)]
    assert parse_sort("password") == [("createdAt", True)]


def test_parse_select_inclusion_keeps_id():
    selection = parse_select("title,location.area")
    doc = {"id": "p1", "title": "Flat", "price": 100, "location": {"area": "Karen", "city": "Nairobi"}}
    assert selection.apply(doc) == {"id": "p1", "title": "Flat", "location": {"area": "Karen"}}


def test_parse_select_exclusion():
    selection = parse_select("-reports,-location.address")
    assert selection == Selection(("reports", "location.address"), exclude=True)
    doc = {"id": "p1", "reports": [], "location": {"area": "Karen", "address": "Dagoretti Rd"}}
    assert selection.apply(doc) == {"id": "p1", "location": {"area": "Karen"}}
    # The source document is left untouched
    assert doc["location"]["address"] == "Dagoretti Rd"


def test_parse_select_blank():
    assert parse_select(None) is None
    assert parse_select(" , ") is None


def test_user_views():
    user = {"id": "u1", "name": "Grace", "email": "grace@rentmail.com", "phone": "+254", "password": "hash", "role": "landlord"}
    assert user_summary(user) == {"id": "u1", "name": "Grace", "email": "grace@rentmail.com", "phone": "+254"}
    assert user_summary(None) is None
    assert "password" not in public_user(user)
    assert public_user(user)["role"] == "landlord"
