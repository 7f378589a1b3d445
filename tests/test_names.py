import random

from utils.names import (
    normalize_name, clean_name, split_raw, process_names, validate_names,
    clamp_count, random_names, sequential_numbers, name_pool,
)


def test_split_prefers_commas():
    assert split_raw("Ann Lee, Bob") == ["Ann Lee", " Bob"]
    assert split_raw("Ann Bob  Cy") == ["Ann", "Bob", "Cy"]
    assert split_raw(" , ,") == []


def test_clean_name():
    assert normalize_name("  Mary   Jane!! ") == "Mary Jane"
    assert normalize_name("O'Neil-Smith Jr.") == "ONeil-Smith Jr."
    assert clean_name("A" * 30) == "A" * 20


def test_process_names_dedupes_case_insensitively():
    assert process_names("Ann, bob, ANN, Bob, Cy") == ["Ann", "bob", "Cy"]


def test_validation_reports_duplicates():
    result = validate_names("Ann, Bob, ann")
    assert result.names == ["Ann", "Bob"]
    assert result.warnings == {"duplicates": 1}
    assert result.is_valid
    assert result.messages() == ["1 duplicate name was removed."]


def test_validation_requires_two_names():
    result = validate_names("Solo")
    assert not result.is_valid
    assert result.warnings["min_names"] == 1
    assert "Please enter at least 2 names." in result.messages()


def test_long_names_are_truncated_not_rejected():
    result = validate_names("Bartholomew Montgomery Jones, Al")
    assert result.is_valid
    assert result.warnings["long_names"] == 1
    assert result.names[0] == "Bartholomew Montgome"


def test_clamp_count():
    assert clamp_count(None) == 10
    assert clamp_count(0) == 10
    assert clamp_count(5) == 5
    assert clamp_count(500) == 99
    assert clamp_count(-3) == 1


def test_random_names_are_distinct_pool_members():
    names = random_names(15, random.Random(1))
    assert len(names) == 15
    assert len(set(names)) == 15
    pool = set(name_pool())
    assert all(n in pool for n in names)


def test_random_names_by_origin():
    names = random_names(3, random.Random(2), origin="spanish")
    assert set(names) <= set(name_pool("spanish"))


def test_sequential_numbers_are_shuffled_permutation():
    numbers = sequential_numbers(20, random.Random(3))
    assert sorted(numbers, key=int) == [str(i) for i in range(1, 21)]
    assert numbers != [str(i) for i in range(1, 21)]


def test_negative_counts_still_give_one_entry():
    assert clamp_count(-5) == 1
    assert len(random_names(-5, random.Random(4))) == 1
    assert sequential_numbers(-5, random.Random(4)) == ["1"]


def test_counts_over_the_cap_are_clamped():
    assert len(sequential_numbers(150, random.Random(5))) == 99
    assert len(random_names(150, random.Random(5))) == 99


def test_accented_letters_are_dropped():
    assert normalize_name("José Müller") == "Jos Mller"
