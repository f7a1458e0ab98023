from tracker_query.mapping import (
    BadRequestError,
    DuplicateFilterError,
    ForbiddenError,
    InvalidOrderError,
    NotFoundError,
)
from tracker_query.utils.errors import FoundationError, ProblemDetail


def test_problem_detail_to_response():
    problem = ProblemDetail(title="Error", status=400, detail="Bad")
    response = problem.to_response()
    assert response["title"] == "Error"
    assert "extra" not in response
    assert "instance" not in response


def test_foundation_error_wraps_problem():
    error = FoundationError("Oops", status=404)
    assert error.problem.status == 404
    assert error.problem.detail == "Oops"


def test_mapping_errors_carry_status_and_title():
    not_found = NotFoundError("Program does not exist: IpHINAT79UW", uid="IpHINAT79UW")
    forbidden = ForbiddenError("User has no access to program: IpHINAT79UW")

    assert isinstance(not_found, BadRequestError)
    assert not_found.problem.model_dump() == {
        "title": "Bad Request",
        "status": 400,
        "detail": "Program does not exist: IpHINAT79UW",
        "type": "about:blank",
        "extra": {"uid": "IpHINAT79UW"},
    }
    assert forbidden.problem.status == 403
    assert forbidden.problem.title == "Forbidden"


def test_duplicate_filter_error_lists_sorted_uids():
    error = DuplicateFilterError("filter", "data element", ["OBzmpRP6YUh", "KSd4PejqBf9"])

    assert error.duplicates == ("KSd4PejqBf9", "OBzmpRP6YUh")
    assert "KSd4PejqBf9, OBzmpRP6YUh" in error.message


def test_invalid_order_error_message():
    assert InvalidOrderError("foo").message == (
        "Cannot order by 'foo'. Not a valid field, data element, or attribute."
    )
