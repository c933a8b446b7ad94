import pytest
from botocore.exceptions import ClientError, NoCredentialsError

from cwlogs.aws import queries
from cwlogs.aws.client import (
    ConfigurationError,
    ExpiredTokenError,
    UnexpectedError,
    translate_errors,
)


def _client_error(code, operation="DescribeLogGroups"):
    return ClientError({"Error": {"Code": code, "Message": f"{code} happened"}}, operation)


class FakePaginator:
    def __init__(self, pages, error=None):
        self.pages = pages
        self.error = error
        self.kwargs = None

    def paginate(self, **kwargs):
        self.kwargs = kwargs
        for page in self.pages:
            yield page
        if self.error:
            raise self.error


class FakeLogsClient:
    def __init__(self, paginators=None, events=None, error=None):
        self.paginators = paginators or {}
        self.events = events or []
        self.error = error
        self.filter_calls = []

    def get_paginator(self, operation):
        return self.paginators[operation]

    def filter_log_events(self, **kwargs):
        self.filter_calls.append(kwargs)
        if self.error:
            raise self.error
        return {"events": self.events}


def test_fetch_log_groups_merges_pages():
    paginator = FakePaginator([
        {"logGroups": [{"logGroupName": "/a/one", "creationTime": 10}]},
        {"logGroups": [{"logGroupName": "/a/two"}]},
    ])
    client = FakeLogsClient({"describe_log_groups": paginator})
    groups = queries.fetch_log_groups(client)
    assert groups == [queries.LogGroup("/a/one", 10), queries.LogGroup("/a/two", 0)]


def test_fetch_log_streams_passes_group_name():
    paginator = FakePaginator([
        {"logStreams": [{"logStreamName": "s1", "lastEventTimestamp": 5}]},
        {"logStreams": [{"logStreamName": "s2"}]},
    ])
    client = FakeLogsClient({"describe_log_streams": paginator})
    streams = queries.fetch_log_streams(client, "/a/one")
    assert paginator.kwargs == {"logGroupName": "/a/one"}
    assert streams == [queries.LogStream("s1", 5), queries.LogStream("s2", None)]


def test_expired_token_during_pagination():
    paginator = FakePaginator([{"logGroups": []}], error=_client_error("ExpiredTokenException"))
    client = FakeLogsClient({"describe_log_groups": paginator})
    with pytest.raises(ExpiredTokenError):
        queries.fetch_log_groups(client)


def test_filter_log_events_is_bounded_and_keeps_order():
    client = FakeLogsClient(events=[
        {"timestamp": 100, "message": "a"},
        {"timestamp": 105, "message": "b"},
        {"timestamp": 103, "message": "c"},
    ])
    events = queries.filter_log_events(client, "/a/one", "s1", start_time=42, limit=200)
    assert client.filter_calls == [{
        "logGroupName": "/a/one",
        "logStreamNames": ["s1"],
        "startTime": 42,
        "limit": 200,
    }]
    assert [event.timestamp for event in events] == [100, 105, 103]


def test_get_session_token_returns_credentials():
    class FakeSts:
        def get_session_token(self, DurationSeconds):
            self.duration = DurationSeconds
            return {"Credentials": {"AccessKeyId": "ASIA", "SecretAccessKey": "s", "SessionToken": "t"}}

    sts = FakeSts()
    issued = queries.get_session_token(sts, 3600)
    assert sts.duration == 3600
    assert issued["SessionToken"] == "t"


@pytest.mark.parametrize("code", [
    "ExpiredTokenException",
    "UnrecognizedClientException",
    "InvalidClientTokenId",
    "ExpiredToken",
])
def test_translate_errors_expired_codes(code):
    with pytest.raises(ExpiredTokenError):
        with translate_errors("fetching log groups"):
            raise _client_error(code)


def test_translate_errors_wraps_other_client_errors():
    with pytest.raises(UnexpectedError) as excinfo:
        with translate_errors("fetching log streams"):
            raise _client_error("ResourceNotFoundException", "DescribeLogStreams")
    assert str(excinfo.value).startswith("An error occurred while fetching log streams:")


def test_translate_errors_missing_credentials():
    with pytest.raises(ConfigurationError):
        with translate_errors("fetching log groups"):
            raise NoCredentialsError()


def test_available_regions_includes_us_east_1():
    regions = queries.available_regions()
    assert "us-east-1" in regions
    assert regions == sorted(regions)
