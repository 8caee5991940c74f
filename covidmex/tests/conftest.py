"""
Shared fixtures: a fake HTTP transport and a per-test scratch directory.

No test touches the network; requests.get is replaced by a router that
answers registered URLs and returns 404 for everything else.
"""
import io
import zipfile
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest
import requests

from covidmex.config.settings import settings


def make_response(status: int = 200, body: bytes = b"") -> MagicMock:
    """Build a fake requests.Response."""
    response = MagicMock()
    response.status_code = status
    response.headers = {"content-length": str(len(body))}
    response.iter_content.return_value = [body] if body else []
    response.text = body.decode("utf-8", "replace")
    if status >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return response


@pytest.fixture(autouse=True)
def scratch_dir(tmp_path, monkeypatch):
    """Write downloaded files into the test's own temporary directory."""
    directory = tmp_path / "scratch"
    directory.mkdir()
    monkeypatch.setattr(settings, "scratch_dir", str(directory))
    monkeypatch.setattr(settings, "max_attempts", 5)
    return directory


@pytest.fixture
def transport():
    """
    Patch requests.get with a URL router.

    Register answers with transport.routes[url] = (status, body); the mock
    records every call for assertions.
    """
    routes = {}

    def fake_get(url, **kwargs):
        status, body = routes.get(url, (404, b""))
        return make_response(status, body)

    with patch("covidmex.sources.http.requests.get", side_effect=fake_get) as mock_get:
        mock_get.routes = routes
        yield mock_get


def requested_urls(mock_get):
    return [c.args[0] for c in mock_get.call_args_list]


def to_xlsx(df: pd.DataFrame) -> bytes:
    buffer = io.BytesIO()
    df.to_excel(buffer, index=False, engine="openpyxl")
    return buffer.getvalue()


def to_zip(name: str, content: bytes) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr(name, content)
    return buffer.getvalue()


JHU_CSV = (
    "FIPS,Admin2,Province_State,Country_Region,Last_Update,Lat,Long_,"
    "Confirmed,Deaths,Recovered,Active,Combined_Key\n"
    '45001,Abbeville,South Carolina,US,2020-04-01 21:58:49,34.22,-82.46,4,0,0,0,"Abbeville, South Carolina, US"\n'
    ",,,Mexico,2020-04-01 21:58:49,23.6345,-102.5528,1215,29,35,1151,Mexico\n"
).encode("utf-8")

SERENDIPIA_CSV = (
    "N° Caso,Estado,Sexo,Edad,Fecha de Inicio de síntomas,"
    "Identificación de COVID-19 por RT-PCR en tiempo real,Procedencia,Fecha del llegada a México\n"
    "1,CIUDAD DE MÉXICO,M,35,27/02/2020,confirmado,Italia,22/02/2020\n"
    "2,SINALOA,M,41,22/02/2020,confirmado,Italia,21/02/2020\n"
).encode("utf-8")

SSA_CSV = (
    "FECHA_ACTUALIZACION,ID_REGISTRO,ORIGEN,SECTOR,ENTIDAD_UM,SEXO,TIPO_PACIENTE,"
    "FECHA_INGRESO,FECHA_SINTOMAS,FECHA_DEF,INTUBADO,NEUMONIA,EDAD,RESULTADO,UCI\n"
    "2020-04-20,z482b8,1,4,09,2,1,2020-04-10,2020-04-05,9999-99-99,97,2,44,1,97\n"
    "2020-04-20,z49a69,2,99,15,1,2,2020-04-11,2020-04-07,2020-04-15,1,1,67,3,2\n"
).encode("latin1")
