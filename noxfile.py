import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]


def _install(session: nox.Session) -> None:
    """Install the project with its test extras into the nox virtualenv."""
    session.install("-e", ".[test]")


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run full test suite across Python versions."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Run domain-layer tests only (no infrastructure required)."""
    _install(session)
    session.run(
        "pytest",
        "tests/ordering/domain/",
        "tests/payments/domain/",
    )


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_sqlite(session: nox.Session) -> None:
    """Run the full suite against SQLite (the `sqlite` overlay in domain.toml)."""
    session.install("-e", ".[test,sqlite]")
    session.run("pytest", "--protean-env", "sqlite", *session.posargs, env={"PROTEAN_ENV": "sqlite"})


@nox.session(python=PYTHON_VERSIONS[-1])
def tests_postgres(session: nox.Session) -> None:
    """Run the full suite against PostgreSQL (STOREFRONT_DATABASE_URL)."""
    session.install("-e", ".[test,postgres]")
    session.run("pytest", "--protean-env", "postgresql", *session.posargs, env={"PROTEAN_ENV": "postgresql"})
