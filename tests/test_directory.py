import pytest
from sqlalchemy.exc import SQLAlchemyError

from utils.sample_order_reporting.directory import HierarchyDirectory, classify_role
from utils.sample_order_reporting.models import ViewerRole


class TestListings:

    def test_employees_by_rm_include_the_active_rm(self, directory):
        emails = list(directory.get_employees_by_rm('rm1@x.com')['email'])
        assert sorted(emails) == ['e1@x.com', 'e2@x.com', 'rm1@x.com']

    def test_employees_by_rm_skip_inactive_reports(self, directory):
        emails = set(directory.get_employees_by_rm('rm2@x.com')['email'])
        assert emails == {'e3@x.com', 'rm2@x.com'}

    def test_reporting_managers_by_zm_are_unique_references(self, directory):
        rms = directory.get_reporting_managers_by_zm('zm@x.com')
        assert sorted(rms['email']) == ['rm1@x.com', 'rm2@x.com']
        assert set(rms['name']) == {'Ravi One', 'Rita Two'}

    def test_all_zonal_managers(self, directory):
        assert sorted(directory.get_all_zonal_managers()['email']) == ['zm2@x.com', 'zm@x.com']

    def test_all_active_sales_employees(self, directory):
        emails = set(directory.get_all_active_sales_employees()['email'])
        assert 'e4@x.com' not in emails
        assert 'ops@x.com' not in emails
        assert len(emails) == 9

    def test_unknown_manager_gives_empty_frame(self, directory):
        df = directory.get_employees_by_rm('nobody@x.com')
        assert df.empty
        assert list(df.columns) == ['email', 'name']

    def test_failed_reports_query_gives_empty_team(self, directory, monkeypatch):
        from utils.sample_order_reporting import directory as directory_module

        real_query = directory_module.execute_query_df

        def failing_reports(query, params=None, engine=None):
            if 'reporting_manager_email = :rm_email' in str(query):
                raise SQLAlchemyError("reports unavailable")
            return real_query(query, params, engine=engine)

        monkeypatch.setattr(directory_module, 'execute_query_df', failing_reports)
        df = directory.get_employees_by_rm('rm1@x.com')
        assert df.empty
        assert list(df.columns) == ['email', 'name']

    def test_listing_errors_degrade_to_empty(self, empty_engine):
        df = HierarchyDirectory(engine=empty_engine).get_reporting_managers_by_zm('zm@x.com')
        assert df.empty


class TestValidation:

    def test_filter_valid_emails_drops_inactive_and_unknown(self, directory):
        result = directory.filter_valid_emails(['e1@x.com', 'e4@x.com', 'ghost@x.com', 'e3@x.com'])
        assert result == ['e1@x.com', 'e3@x.com']

    def test_filter_valid_emails_by_line_of_business(self, directory):
        result = directory.filter_valid_emails(
            ['e1@x.com', 'e2@x.com', 'e3@x.com'], ['K8 & Test Prep', 'K8']
        )
        assert result == ['e1@x.com', 'e3@x.com']

    def test_filter_valid_emails_empty_input(self, directory):
        assert directory.filter_valid_emails([]) == []

    def test_validation_errors_propagate(self, empty_engine):
        with pytest.raises(SQLAlchemyError):
            HierarchyDirectory(engine=empty_engine).filter_valid_emails(['e1@x.com'])

    def test_is_referenced_as_rejects_other_columns(self, directory):
        with pytest.raises(ValueError):
            directory.is_referenced_as('email', 'zm@x.com')


class TestClassifyRole:

    @pytest.mark.parametrize('email, expected', [
        ('zm@x.com', ViewerRole.ZONAL_MANAGER),
        ('rm1@x.com', ViewerRole.REPORTING_MANAGER),
        ('e1@x.com', ViewerRole.EMPLOYEE),
        ('pt@x.com', ViewerRole.PROGRAM_TEAM),
    ])
    def test_roles(self, directory, email, expected):
        assert classify_role(directory, email) == expected

    def test_inactive_employee_has_no_role(self, directory):
        assert classify_role(directory, 'e4@x.com') is None

    def test_unknown_email_has_no_role(self, directory):
        assert classify_role(directory, 'ghost@x.com') is None

    def test_unreachable_directory_has_no_role(self, empty_engine):
        assert classify_role(HierarchyDirectory(engine=empty_engine), 'e1@x.com') is None
