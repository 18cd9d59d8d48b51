from backend.validation import (
    is_url,
    validate_education_input,
    validate_experience_input,
    validate_profile_input,
)


def test_profile_input_is_sparse():
    result = validate_profile_input({"company": "Acme", "website": "", "bio": None})
    assert result.is_valid
    assert result.fields == {"company": "Acme"}


def test_profile_handle_length():
    result = validate_profile_input({"handle": "a"})
    assert not result.is_valid
    assert result.errors == {"handle": "Handle needs to be between 2 and 40 characters"}


def test_profile_urls_are_checked():
    result = validate_profile_input({"website": "not a url", "twitter": "ftp://x.com"})
    assert set(result.errors) == {"website", "twitter"}
    assert result.errors["website"] == "Not a valid URL"


def test_profile_keeps_raw_skills_string():
    result = validate_profile_input({"skills": "node, go,"})
    assert result.fields["skills"] == "node, go,"


def test_is_url_accepts_missing_scheme():
    assert is_url("example.com")
    assert is_url("https://www.linkedin.com/in/dev")
    assert not is_url("ftp://files.example.com")


def test_is_url_accepts_local_ipv6_and_idn_hosts():
    for url in ("http://localhost:3000/me", "https://münchen.de", "http://[::1]:8080/", "localhost"):
        assert is_url(url), url
        assert validate_profile_input({"website": url}).is_valid, url


def test_experience_required_fields():
    result = validate_experience_input({"title": "", "location": "Berlin"})
    assert result.errors == {
        "title": "Job title field is required",
        "company": "Company field is required",
        "from": "From date field is required",
    }


def test_experience_bad_date():
    result = validate_experience_input({"title": "Dev", "company": "Acme", "from": "yesterday"})
    assert result.errors == {"from": "Invalid date, expected YYYY-MM-DD"}


def test_experience_fields_use_wire_names():
    result = validate_experience_input(
        {"title": "Dev", "company": "Acme", "from": "2020-01-01", "to": "", "current": True}
    )
    assert result.is_valid
    assert result.fields == {"title": "Dev", "company": "Acme", "from": "2020-01-01", "current": True}


def test_education_required_fields():
    result = validate_education_input({"school": "MIT"})
    assert set(result.errors) == {"degree", "fieldofstudy", "from"}
