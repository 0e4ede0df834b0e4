from __future__ import annotations

from placement.models import ApplicationStatus, PostingLevel
from placement.services.reports import ReportFilter


def _populate(lifecycle, representative, make_student, make_posting, make_representative, successful_application):
    globex = make_representative(email="hr@globex.com", company_name="Globex")
    acme_posting = make_posting(title="Acme Intern")
    globex_posting = make_posting(owner=globex, title="Globex Intern", level=PostingLevel.INTERMEDIATE)

    placed = make_student("U1000001A", major="Computer Science", name="Placed Student")
    offer = successful_application(placed, acme_posting)
    lifecycle.accept_placement(placed, offer.id)

    waiting = make_student("U1000002B", year=4, major="Business", name="Waiting Student")
    lifecycle.submit_application(waiting, acme_posting.id)
    globex_application = lifecycle.submit_application(waiting, globex_posting.id)
    lifecycle.decide_application(globex, globex_application.id, False)
    return placed, waiting


def test_report_summarises_everything(
    reports, lifecycle, representative, make_student, make_posting, make_representative, successful_application
):
    placed, _ = _populate(
        lifecycle, representative, make_student, make_posting, make_representative, successful_application
    )

    report = reports.generate()

    assert report.total_applications == 3
    assert report.applications_by_status == {"Successful": 1, "Pending": 1, "Rejected": 1}
    assert report.total_postings == 2
    assert report.postings_by_status == {"Approved": 2}
    assert report.approved_representatives == 2
    assert report.total_placements == 1
    assert report.placements_by_company == {"Acme": 1}
    assert report.applications_by_major == {"Computer Science": 1, "Business": 2}
    assert report.applications_by_year == {"3": 1, "4": 2}
    [row] = report.placements
    assert row["student_id"] == placed.id
    assert row["internship_title"] == "Acme Intern"


def test_report_filters(
    reports, lifecycle, representative, make_student, make_posting, make_representative, successful_application
):
    _populate(lifecycle, representative, make_student, make_posting, make_representative, successful_application)

    by_major = reports.generate(ReportFilter(major="business"))
    assert by_major.total_applications == 2
    assert by_major.total_placements == 0

    by_company = reports.generate(ReportFilter(company_name="Globex"))
    assert by_company.total_postings == 1
    assert by_company.applications_by_status == {"Rejected": 1}

    by_status = reports.generate(ReportFilter(application_status=ApplicationStatus.PENDING))
    assert by_status.total_applications == 1

    by_level = reports.generate(ReportFilter(level=PostingLevel.INTERMEDIATE, year_of_study=4))
    assert by_level.total_applications == 1
