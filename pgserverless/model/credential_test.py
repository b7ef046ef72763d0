"""
Tests for connection credential parsing.
"""

import unittest

import psycopg

from .credential import ConnCredential, parse_url


class TestParseURL(unittest.TestCase):
    """Test parsing user and database from connection strings."""

    def test_parse_postgres_url(self):
        """Test a regular postgres URL."""
        url = "postgres://alice:pw@host:5432/mydb?sslmode=disable"
        cred = parse_url(url)

        self.assertEqual(cred, ConnCredential(user="alice", database="mydb", url=url))

    def test_parse_rds_url(self):
        """Test a URL with a non ascii host."""
        cred = parse_url(
            "postgres://matteo:mypass@pg–instance1.123456789012.us-east-1.rds.amazonaws.com"
            ":5432/posts?sslmode=disable"
        )

        self.assertEqual(cred.user, "matteo")
        self.assertEqual(cred.database, "posts")

    def test_parse_postgresql_scheme(self):
        """Test the postgresql scheme and escaped user names."""
        cred = parse_url("postgresql://data%40team@localhost/analytics")

        self.assertEqual(cred.user, "data@team")
        self.assertEqual(cred.database, "analytics")

    def test_parse_non_database_url(self):
        """Test a URL that is not a database URL yields empty strings."""
        cred = parse_url("https://example.com")

        self.assertEqual(cred.user, "")
        self.assertEqual(cred.database, "")
        self.assertEqual(cred.url, "https://example.com")

    def test_parse_url_without_user_or_database(self):
        """Test a database URL missing user and path."""
        cred = parse_url("postgres://localhost:5432")

        self.assertEqual(cred.user, "")
        self.assertEqual(cred.database, "")

    def test_parse_key_value_string(self):
        """Test a libpq key/value connection string."""
        cred = parse_url("host=localhost port=5432 user=bob dbname=orders")

        self.assertEqual(cred.user, "bob")
        self.assertEqual(cred.database, "orders")

    def test_parse_invalid_port(self):
        """Test a structurally broken URL raises."""
        with self.assertRaises(ValueError):
            parse_url("postgres://alice:pw@host:port/mydb")

    def test_parse_invalid_key_value_string(self):
        """Test a broken key/value string raises."""
        with self.assertRaises(psycopg.ProgrammingError):
            parse_url("host='unterminated dbname=orders")


if __name__ == "__main__":
    unittest.main()
