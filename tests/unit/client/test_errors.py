"""
Unit tests for map_db_error: driver exceptions -> StoreError taxonomy.
"""

import asyncio

import psycopg
import psycopg.errors as E
import pytest
from psycopg_pool import PoolTimeout

from cds_client.errors import (
    ConstraintViolation,
    MissingFieldError,
    PermissionDenied,
    RetryableError,
    StoreError,
    TimeoutExceeded,
    map_db_error,
)


@pytest.mark.parametrize(
    "exc,expected",
    [
        (E.QueryCanceled("canceling statement due to statement timeout"), TimeoutExceeded),
        (PoolTimeout("couldn't get a connection"), TimeoutExceeded),
        (asyncio.TimeoutError(), TimeoutExceeded),
        (E.InsufficientPrivilege("permission denied for table scenarios"), PermissionDenied),
        (E.NotNullViolation("null value in column \"title\""), MissingFieldError),
        (E.UniqueViolation("duplicate key"), ConstraintViolation),
        (E.CheckViolation("violates check constraint"), ConstraintViolation),
        (E.SerializationFailure("could not serialize access"), RetryableError),
        (psycopg.OperationalError("server closed the connection"), RetryableError),
        (RuntimeError("new row violates row level security policy"), PermissionDenied),
        (RuntimeError("something else"), StoreError),
    ],
)
def test_map_db_error(exc, expected):
    mapped = map_db_error(exc)
    assert type(mapped) is expected


def test_store_errors_pass_through():
    err = ConstraintViolation("dup")
    assert map_db_error(err) is err


def test_codes_are_distinct():
    codes = {
        cls.code
        for cls in (
            StoreError,
            RetryableError,
            ConstraintViolation,
            MissingFieldError,
            PermissionDenied,
            TimeoutExceeded,
        )
    }
    assert len(codes) == 6


def test_timeout_message_never_empty():
    assert str(map_db_error(asyncio.TimeoutError())) == "store call timed out"
