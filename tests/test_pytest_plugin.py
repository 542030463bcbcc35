"""
Tests for the pytest plugin (fixtures, options, teardown drain).

Each test runs a small inner test session through pytester.
"""


def test_fixture_reconciles_shared_console(pytester):
    """The mock_console fixture wraps the shared console."""
    pytester.makepyfile(
        """
        from mock_console import console

        def test_warns(mock_console):
            console.warn("deprecated", 2)
            mock_console.expect_warn("deprecated", 2)
            assert mock_console.installed
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)


def test_leftover_message_fails_teardown(pytester):
    """A passing body with unmatched messages errors at teardown."""
    pytester.makepyfile(
        """
        from mock_console import console

        def test_leaks(mock_console):
            console.log("one", "two")
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1, errors=1)
    result.stdout.fnmatch_lines(["*Messages received but not expected:*"])
    assert '0: {"type":"log","arguments":["one","two"]}' in result.stdout.str()


def test_failed_body_skips_drain_checks(pytester):
    """A test that already failed reports only its own failure."""
    pytester.makepyfile(
        """
        from mock_console import console

        def test_fails(mock_console):
            mock_console.expect_error("never")
            assert False, "body failed"

        def test_next_starts_clean(mock_console):
            assert mock_console.is_empty
            console.log("fresh")
            mock_console.expect_log("fresh")
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1, failed=1)
    result.stdout.no_fnmatch_line("*Messages expected but not received*")


def test_mismatch_fails_the_test(pytester):
    """A mismatch raised inside the body is an assertion failure."""
    pytester.makepyfile(
        """
        from mock_console import console

        def test_mismatch(mock_console):
            mock_console.expect_log("another")
            console.log("one")
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*UnexpectedMismatch*", "*But received message:*"])


def test_logger_factory(pytester):
    """mock_logger wraps loggers by name or instance and drains them all."""
    pytester.makepyfile(
        """
        import logging

        def test_loggers(mock_logger):
            db = mock_logger("app.db")
            api = mock_logger(logging.getLogger("app.api"))

            logging.getLogger("app.db").warning("slow query: %s", "SELECT 1")
            logging.getLogger("app.api").error("timeout")

            db.expect_warn("slow query: %s", "SELECT 1")
            api.expect_error("timeout")

        def test_restored(mock_logger):
            assert "warning" not in vars(logging.getLogger("app.db"))
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=2)


def test_no_verbose_option_auto_passes_dev_expectations(pytester):
    """--no-mock-console-verbose turns dev expectations into no-ops."""
    pytester.makepyfile(
        """
        def test_dev(mock_console):
            mock_console.expect_log_dev("only in dev")
            assert not mock_console.verbose
        """
    )

    result = pytester.runpytest("--no-mock-console-verbose")

    result.assert_outcomes(passed=1)


def test_ini_configuration(pytester):
    """ini keys configure the fixture's reconciler."""
    pytester.makeini(
        """
        [pytest]
        mock_console_verbose = false
        mock_console_capture_stack = false
        mock_console_stack_limit = 4
        """
    )
    pytester.makepyfile(
        """
        def test_config(mock_console_config):
            assert mock_console_config.verbose is False
            assert mock_console_config.capture_stack is False
            assert mock_console_config.stack_limit == 4
        """
    )

    result = pytester.runpytest()

    result.assert_outcomes(passed=1)


def test_verbose_option_overrides_ini(pytester):
    """The command-line flag wins over the ini key."""
    pytester.makeini(
        """
        [pytest]
        mock_console_verbose = false
        """
    )
    pytester.makepyfile(
        """
        def test_config(mock_console):
            assert mock_console.verbose is True
            mock_console.expect_warn_dev("dev")
            mock_console.receive("warn", ["dev"])
        """
    )

    result = pytester.runpytest("--mock-console-verbose")

    result.assert_outcomes(passed=1)
