import pytest
import requests

from scyllanode.errors import ManagementError
from scyllanode.status.management import JolokiaClient, STORAGE_SERVICE


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("no json")
        return self._body


class FakeHttp:
    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.exc:
            raise self.exc
        return self.response


def test_reads_attribute_value():
    http = FakeHttp(FakeResponse(body={"status": 200, "value": ["10.0.0.1", "10.0.0.2"]}))
    client = JolokiaClient(session=http)
    assert client.read_attribute("10.0.0.1", STORAGE_SERVICE, "LiveNodes") == ["10.0.0.1", "10.0.0.2"]
    assert http.urls == [
        "http://10.0.0.1:8778/jolokia/read/org.apache.cassandra.db:type=StorageService/LiveNodes"
    ]


@pytest.mark.parametrize("http", [
    FakeHttp(exc=requests.ConnectionError("refused")),
    FakeHttp(exc=requests.Timeout("slow")),
    FakeHttp(FakeResponse(status_code=500)),
    FakeHttp(FakeResponse(body=None)),
    FakeHttp(FakeResponse(body={"status": 404, "error": "InstanceNotFoundException"})),
])
def test_failures_surface_as_management_error(http):
    with pytest.raises(ManagementError):
        JolokiaClient(session=http).read_attribute("10.0.0.1", STORAGE_SERVICE, "LiveNodes")
