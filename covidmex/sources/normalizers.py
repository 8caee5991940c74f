"""
Normalization of report tables into the common covidmex schema.

Each source gets a fixed schema mapping (positional column renames and/or
required column names) plus date parsing, entity name casing and, for the
Ministry of Health open dataset, decoding of integer-coded categories.

Cleaning never turns a successful download into a failure: apply_normalizer
downgrades any error to a NormalizationWarning and returns the table as-is.
Every step leaves already-normalized values unchanged, so cleaning a clean
table again is a no-op.
"""
import warnings
from typing import Callable, Dict, Optional, Sequence

import pandas as pd

from covidmex.core.errors import NormalizationWarning, SchemaMismatchError
from covidmex.models.request import CaseType, Source
from covidmex.utils.logging import get_logger

logger = get_logger("sources.normalizers")

# Day zero of spreadsheet serial dates
SPREADSHEET_EPOCH = pd.Timestamp("1899-12-30")


class SchemaMapping:
    """
    Canonical column layout of a source.

    Args:
        source: Source the mapping belongs to
        columns: Canonical names given, in order, to the first len(columns) columns
        required: Column names that must exist once renamed
    """

    def __init__(self, source: Source, columns: Sequence[str] = (), required: Sequence[str] = ()):
        self.source = source
        self.columns = tuple(columns)
        self.required = tuple(required)

    def apply(self, df: pd.DataFrame) -> pd.DataFrame:
        if len(df.columns) < len(self.columns):
            raise SchemaMismatchError(
                f"{self.source.value} table has {len(df.columns)} columns, "
                f"expected at least {len(self.columns)}"
            )
        if self.columns:
            df = df.copy()
            df.columns = list(self.columns) + list(df.columns[len(self.columns):])

        missing = [c for c in self.required if c not in df.columns]
        if missing:
            raise SchemaMismatchError(f"{self.source.value} table is missing columns: {missing}")
        return df


SERENDIPIA_SCHEMA = SchemaMapping(
    Source.SERENDIPIA,
    columns=["id_registro", "ent", "sexo", "edad", "fecha_inicio", "identificado"],
)

GUZMART_SCHEMA = SchemaMapping(
    Source.GUZMART,
    required=["ent", "fecha_corte", "fecha_inicio", "fecha_llegada_mexico"],
)

ECDC_SCHEMA = SchemaMapping(
    Source.ECDC,
    columns=[
        "fecha_corte", "dia", "mes", "anio", "casos_nuevos", "decesos",
        "pais_territorio", "geo_id", "poblacion_2018",
    ],
)

JHU_SCHEMA = SchemaMapping(
    Source.JHU,
    columns=[
        "fips", "ciudad_municipio", "provincia_estado", "pais_region",
        "fecha_corte", "latitud", "longitud", "positivos", "decesos",
        "recuperados", "activos", "key",
    ],
)

SSA_SCHEMA = SchemaMapping(Source.SSA, required=["SEXO", "RESULTADO"])


# === Open dataset code tables ===

YES_NO_CODES = {1: "Sí", 2: "No", 97: "No aplica", 98: "Se ignora"}

SSA_CODES: Dict[str, Dict[int, str]] = {
    "ORIGEN": {1: "USMER", 2: "Fuera de USMER"},
    "SECTOR": {
        1: "Cruz Roja", 2: "DIF", 3: "Estatal", 4: "IMSS", 5: "IMSS-Bienestar",
        6: "ISSSTE", 7: "Municipal", 8: "PEMEX", 9: "Privada", 10: "SEDENA",
        11: "SEMAR", 12: "Federal", 13: "Universitario",
    },
    "SEXO": {1: "Femenino", 2: "Masculino"},
    "TIPO_PACIENTE": {1: "Ambulatorio", 2: "Hospitalizado"},
    "NACIONALIDAD": {1: "Mexicana", 2: "Extranjero"},
    "RESULTADO": {1: "Positivo a SARS-CoV-2", 2: "Negativo a SARS-CoV-2", 3: "Pendiente"},
}
for _column in (
    "INTUBADO", "NEUMONIA", "EMBARAZO", "HABLA_LENGUA_INDIG", "DIABETES",
    "EPOC", "ASMA", "INMUSUPR", "HIPERTENSION", "OTRA_COM", "CARDIOVASCULAR",
    "OBESIDAD", "RENAL_CRONICA", "TABAQUISMO", "OTRO_CASO", "MIGRANTE", "UCI",
):
    SSA_CODES[_column] = YES_NO_CODES

SSA_DATE_COLUMNS = ("FECHA_ACTUALIZACION", "FECHA_INGRESO", "FECHA_SINTOMAS", "FECHA_DEF")


# === Column transforms ===

def title_case_entity(series: pd.Series) -> pd.Series:
    """Title-case state / entity names, keeping the article 'de' lowercase."""
    return series.str.title().str.replace(r"\bDe\b", "de", regex=True)


def parse_dates(series: pd.Series, fmt: Optional[str] = None, dayfirst: bool = False) -> pd.Series:
    """Parse text dates with the given format; unparseable values become NaT."""
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    return pd.to_datetime(series, format=fmt, dayfirst=dayfirst, errors="coerce")


def serial_to_date(series: pd.Series) -> pd.Series:
    """Convert spreadsheet serial day numbers (epoch 1899-12-30) to dates."""
    if pd.api.types.is_datetime64_any_dtype(series):
        return series
    days = pd.to_numeric(series, errors="coerce") // 1
    return SPREADSHEET_EPOCH + pd.to_timedelta(days, unit="D")


def recode(series: pd.Series, codes: Dict[int, str]) -> pd.Series:
    """
    Decode an integer-coded column into labeled categories.

    Codes missing from the table (e.g. 99, "not specified") become NaN.
    Columns that are not numeric are assumed decoded already and are
    returned unchanged.
    """
    if not pd.api.types.is_numeric_dtype(series):
        return series
    categories = list(dict.fromkeys(codes.values()))
    return pd.Series(
        pd.Categorical(series.map(codes), categories=categories),
        index=series.index,
        name=series.name,
    )


# === Per-source normalizers ===

def normalize_serendipia(df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    df = SERENDIPIA_SCHEMA.apply(df)
    df["ent"] = title_case_entity(df["ent"])
    df["fecha_inicio"] = parse_dates(df["fecha_inicio"], "%d/%m/%Y")
    return df


def normalize_guzmart(df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    df = GUZMART_SCHEMA.apply(df)
    df["ent"] = title_case_entity(df["ent"])
    df["fecha_corte"] = parse_dates(df["fecha_corte"])
    df["fecha_llegada_mexico"] = serial_to_date(df["fecha_llegada_mexico"])
    df["fecha_inicio"] = serial_to_date(df["fecha_inicio"])
    return df


def normalize_ssa(df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    df = SSA_SCHEMA.apply(df)
    for column, codes in SSA_CODES.items():
        if column in df.columns:
            df[column] = recode(df[column], codes)
    for column in SSA_DATE_COLUMNS:
        if column in df.columns:
            # Unknown dates are published as 9999-99-99
            df[column] = parse_dates(df[column], "%Y-%m-%d")
    return df


def normalize_ecdc(df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    df = ECDC_SCHEMA.apply(df)
    df["fecha_corte"] = parse_dates(df["fecha_corte"], "mixed", dayfirst=True)
    return df


def normalize_jhu(df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    df = JHU_SCHEMA.apply(df)
    df["fecha_corte"] = parse_dates(df["fecha_corte"], "mixed")
    return df


NORMALIZERS: Dict[Source, Callable[[pd.DataFrame, CaseType], pd.DataFrame]] = {
    Source.SERENDIPIA: normalize_serendipia,
    Source.GUZMART: normalize_guzmart,
    Source.SSA: normalize_ssa,
    Source.ECDC: normalize_ecdc,
    Source.JHU: normalize_jhu,
}


def apply_normalizer(source: Source, df: pd.DataFrame, case_type: CaseType) -> pd.DataFrame:
    """
    Clean a report table, falling back to the raw table on failure.

    Args:
        source: Source the table came from
        df: Raw table
        case_type: Kind of cases in the table

    Returns:
        The cleaned table, or df untouched if cleaning failed
    """
    try:
        clean = NORMALIZERS[source](df.copy(), case_type)
    except Exception as e:
        message = (
            "Cleaning data failed! Maybe a column was added/removed or changed. "
            f"The data is returned as-is, please clean it manually.\n{e}"
        )
        logger.warning(f"{source.value}: {message}")
        warnings.warn(message, NormalizationWarning, stacklevel=3)
        return df

    logger.debug(f"Normalized {source.value} table: {list(clean.columns)}")
    return clean
