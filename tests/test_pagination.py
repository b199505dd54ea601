from app.services.pagination import Window, coerce_positive, page_window, pagination_links


def test_window_skip():
    assert Window(page=1, limit=10).skip == 0
    assert Window(page=3, limit=12).skip == 24


def test_coerce_positive_falls_back_to_default():
    assert coerce_positive("4", 1) == 4
    assert coerce_positive("0", 1) == 1
    assert coerce_positive("-3", 10) == 10
    assert coerce_positive("abc", 10) == 10
    assert coerce_positive(None, 10) == 10


def test_page_window_defaults_and_cap():
    assert page_window(None, None, default_limit=10) == Window(page=1, limit=10)
    assert page_window("2", "500", default_limit=10, max_limit=100) == Window(page=2, limit=100)


def test_single_page_has_no_links():
    assert pagination_links(Window(page=1, limit=12), total=5) == {}


def test_first_page_of_many_has_next_only():
    assert pagination_links(Window(page=1, limit=10), total=25) == {"next": {"page": 2, "limit": 10}}


def test_middle_page_has_both_links():
    assert pagination_links(Window(page=2, limit=10), total=25) == {
        "next": {"page": 3, "limit": 10},
        "prev": {"page": 1, "limit": 10},
    }


def test_exact_last_page_has_prev_only():
    assert pagination_links(Window(page=2, limit=10), total=20) == {"prev": {"page": 1, "limit": 10}}


def test_page_past_the_end_still_points_back():
    assert pagination_links(Window(page=5, limit=10), total=20) == {"prev": {"page": 4, "limit": 10}}


def test_page_window_ignores_offsets_past_64_bits():
    assert page_window("99999999999999999999", "10", default_limit=10) == Window(page=1, limit=10)
    assert page_window(str(2 ** 62), "10", default_limit=10, max_limit=100) == Window(page=1, limit=10)
    assert page_window("3", "99999999999999999999", default_limit=10) == Window(page=3, limit=10)
