import pytest

from bookstore.utils.pagination import ELLIPSIS, paginate, paginate_result, page_offset


def test_no_records_means_no_pages():
    info = paginate(0, 10, 1)
    assert info.total_pages == 0
    assert info.current_page == 1
    assert info.page_links == []
    assert not info.has_previous_page
    assert not info.has_next_page
    assert info.previous_page is None
    assert info.next_page is None


def test_page_past_the_end_is_clamped():
    info = paginate(25, 10, 7)
    assert info.total_pages == 3
    assert info.current_page == 3
    assert info.has_previous_page and info.previous_page == 2
    assert not info.has_next_page and info.next_page is None


def test_page_below_one_is_clamped():
    assert paginate(25, 10, -4).current_page == 1


def test_single_page():
    info = paginate(3, 10, 1)
    assert info.total_pages == 1
    assert info.page_links == [1]


def test_first_page_of_many():
    info = paginate(100, 10, 1)
    assert info.page_links == [1, 2, 3, ELLIPSIS, 10]
    assert not info.has_ellipsis_before
    assert info.has_ellipsis_after
    assert info.next_page == 2


def test_single_hidden_page_is_shown_instead_of_ellipsis():
    # page 2 is the only page between 1 and the window starting at 3
    assert paginate(100, 10, 5).page_links == [1, 2, 3, 4, 5, 6, 7, ELLIPSIS, 10]
    # page 9 is the only page between the window ending at 8 and 10
    assert paginate(100, 10, 6).page_links == [1, ELLIPSIS, 4, 5, 6, 7, 8, 9, 10]


def test_last_page_of_many():
    info = paginate(100, 10, 10)
    assert info.page_links == [1, ELLIPSIS, 8, 9, 10]
    assert info.has_ellipsis_before
    assert not info.has_ellipsis_after


def test_narrow_window():
    info = paginate(100, 10, 5, window_size=3)
    assert info.page_links == [1, ELLIPSIS, 4, 5, 6, ELLIPSIS, 10]


def test_window_shape_holds_for_every_page():
    for total in range(0, 61):
        for limit in (1, 3, 7):
            total_pages = -(-total // limit)
            for page in range(1, total_pages + 2):
                for window in (1, 3, 5, 7):
                    links = paginate(total, limit, page, window).page_links
                    if not links:
                        assert total_pages == 0
                        continue
                    assert links[0] == 1
                    assert links[-1] == total_pages
                    numbers = [link for link in links if link != ELLIPSIS]
                    assert numbers == sorted(set(numbers))
                    for i, link in enumerate(links):
                        if link != ELLIPSIS:
                            continue
                        # never adjacent, never hiding a single page
                        assert links[i - 1] != ELLIPSIS and links[i + 1] != ELLIPSIS
                        assert links[i + 1] - links[i - 1] - 1 >= 2


@pytest.mark.parametrize("args", [
    ("10", 10, 1),
    (10, 10.0, 1),
    (10, 10, None),
    (10, 10, True),
    (10, 0, 1),
    (-1, 10, 1),
])
def test_invalid_inputs_are_rejected(args):
    with pytest.raises(ValueError):
        paginate(*args)


def test_window_size_must_be_odd():
    with pytest.raises(ValueError):
        paginate(100, 10, 1, window_size=4)


def test_paginate_result_wraps_results():
    page = paginate_result(12, ["a", "b"], 10, 2)
    assert page["results"] == ["a", "b"]
    assert page["total_records"] == 12
    assert page["total_pages"] == 2
    assert page["current_page"] == 2
    assert page["page_links"] == [1, 2]


@pytest.mark.parametrize("results", ["ab", {"a": 1}, None, 3])
def test_paginate_result_requires_a_list(results):
    with pytest.raises(ValueError):
        paginate_result(1, results, 10, 1)


def test_page_offset_follows_clamped_page():
    assert page_offset(25, 10, 1) == 0
    assert page_offset(25, 10, 3) == 20
    assert page_offset(25, 10, 99) == 20
    assert page_offset(0, 10, 5) == 0
