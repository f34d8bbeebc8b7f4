"""
Tests for the OSRM routing provider.
"""

import polyline
import pytest
import requests
from unittest.mock import MagicMock

from components.maps.geometry import Coordinate
from components.routing.osrm_client import OSRMClient, OverlayError, RoutingProviderError


START = Coordinate(-6.29816, 106.70786)
END = Coordinate(-6.29894, 106.69725)


def mock_session(payload=None, status_error=None, get_error=None):
    session = MagicMock(spec=requests.Session)
    if get_error is not None:
        session.get.side_effect = get_error
        return session

    response = MagicMock()
    response.json.return_value = payload
    if status_error is not None:
        response.raise_for_status.side_effect = status_error
    session.get.return_value = response
    return session


class TestOSRMClient:
    """Test cases for OSRMClient."""

    def setup_method(self):
        self.points = [(-6.29816, 106.70786), (-6.2985, 106.7025), (-6.29894, 106.69725)]
        self.ok_payload = {
            "code": "Ok",
            "routes": [{"geometry": polyline.encode(self.points, 5)}]
        }

    def test_format_coordinates_is_lon_lat(self):
        assert OSRMClient.format_coordinates(START, END) == "106.70786,-6.29816;106.69725,-6.29894"

    def test_route_url(self):
        client = OSRMClient(base_url="http://localhost:5000/", session=mock_session())
        assert client.route_url(START, END) == (
            "http://localhost:5000/route/v1/driving/106.70786,-6.29816;106.69725,-6.29894"
        )

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("OSRM_BASE_URL", "http://osrm.internal")
        assert OSRMClient(session=mock_session()).base_url == "http://osrm.internal"

    def test_from_config(self, monkeypatch):
        monkeypatch.delenv("OSRM_BASE_URL", raising=False)
        client = OSRMClient.from_config({'base_url': None, 'profile': 'car', 'timeout_sec': 3})

        assert client.base_url == "https://router.project-osrm.org"
        assert client.profile == "car"
        assert client.timeout == 3

    def test_resolve_decodes_polyline(self):
        session = mock_session(self.ok_payload)
        client = OSRMClient(base_url="http://localhost:5000", timeout=5, session=session)

        geometry = client.resolve(START, END)

        assert len(geometry) == 3
        assert geometry[0].latitude == pytest.approx(-6.29816)
        assert geometry[-1].longitude == pytest.approx(106.69725)

        _, kwargs = session.get.call_args
        assert kwargs['params']['overview'] == "full"
        assert kwargs['params']['geometries'] == "polyline"
        assert kwargs['timeout'] == 5

    def test_transport_error(self):
        session = mock_session(get_error=requests.ConnectionError("refused"))
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_timeout_is_a_failure(self):
        session = mock_session(get_error=requests.Timeout("slow"))
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_http_error(self):
        session = mock_session(self.ok_payload, status_error=requests.HTTPError("503"))
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_invalid_json(self):
        session = mock_session()
        session.get.return_value.json.side_effect = ValueError("no json")
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_non_ok_code(self):
        session = mock_session({"code": "NoRoute", "message": "Impossible route", "routes": []})
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError, match="Impossible route"):
            client.resolve(START, END)

    def test_missing_geometry(self):
        session = mock_session({"code": "Ok", "routes": [{}]})
        client = OSRMClient(base_url="http://localhost:5000", session=session)

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_single_point_polyline(self):
        payload = {"code": "Ok", "routes": [{"geometry": polyline.encode([self.points[0]], 5)}]}
        client = OSRMClient(base_url="http://localhost:5000", session=mock_session(payload))

        with pytest.raises(RoutingProviderError):
            client.resolve(START, END)

    def test_error_hierarchy(self):
        assert issubclass(RoutingProviderError, OverlayError)
