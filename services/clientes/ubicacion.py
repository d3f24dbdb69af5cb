"""
Regions and communes of Chile.

Static reference table used to drive the region -> commune selector in the
customer forms. Coverage of communes is partial: regions without an entry in
COMUNAS_POR_REGION simply have no known communes.
"""

from types import MappingProxyType
from typing import Any, List, Mapping, NamedTuple, Optional, Tuple


class Region(NamedTuple):
    id: str
    name: str


class Comuna(NamedTuple):
    id: str
    name: str


REGION_NO_DISPONIBLE = "N/A"

REGIONES: Mapping[str, str] = MappingProxyType({
    "1": "Primera Región (de Tarapacá)",
    "2": "Segunda Región (de Antofagasta)",
    "3": "Tercera Región (de Atacama)",
    "4": "Cuarta Región (de Coquimbo)",
    "5": "Quinta Región (de Valparaíso)",
    "6": "Sexta Región (del Libertador B.O higgins)",
    "7": "Séptima Región (del Maule)",
    "8": "Octava Región (del Bío-Bío)",
    "9": "Novena Región (de la Araucanía)",
    "10": "Décima Región (de los Lagos)",
    "11": "Undécima Región (de Aisén del General Ca)",
    "12": "Duodécima Región (de Magallanes y de la)",
    "13": "Región Metropolitana (de Santiago)",
    "14": "Decimocuarta Región de los Rios",
    "15": "Decimoquinta Región de Arica y Parinacota",
    "16": "Región de Ñuble",
})

COMUNAS_POR_REGION: Mapping[str, Tuple[Comuna, ...]] = MappingProxyType({
    "1": (
        Comuna("01101", "Iquique"),
        Comuna("01102", "Camiña"),
        Comuna("01103", "Colchane"),
        Comuna("01104", "Huara"),
        Comuna("01105", "Pica"),
        Comuna("01106", "Pozo Almonte"),
        Comuna("ALTOHOS", "Alto Hospicio"),
    ),
    "2": (
        Comuna("02101", "Antofagasta"),
        Comuna("02102", "Mejillones"),
        Comuna("02103", "Sierra Gorda"),
        Comuna("02104", "Taltal"),
        Comuna("02201", "Calama"),
        Comuna("02202", "Ollagüe"),
        Comuna("02203", "San Pedro de Atacama"),
        Comuna("02301", "Tocopilla"),
        Comuna("02302", "María Elena"),
    ),
    "13": (
        Comuna("13101", "Santiago"),
        Comuna("13102", "Cerrillos"),
        Comuna("13103", "Cerro Navia"),
        Comuna("13104", "Conchalí"),
        Comuna("13105", "El Bosque"),
        Comuna("13106", "Estación Central"),
        Comuna("13107", "Huechuraba"),
        Comuna("13108", "Independencia"),
        Comuna("13109", "La Cisterna"),
        Comuna("13110", "La Florida"),
        Comuna("13111", "La Granja"),
        Comuna("13112", "La Pintana"),
        Comuna("13113", "La Reina"),
        Comuna("13114", "Las Condes"),
        Comuna("13115", "Lo Barnechea"),
        Comuna("13116", "Lo Espejo"),
        Comuna("13117", "Lo Prado"),
        Comuna("13118", "Macul"),
        Comuna("13119", "Maipú"),
        Comuna("13120", "Ñuñoa"),
        Comuna("13121", "Pedro Aguirre Cerda"),
        Comuna("13122", "Peñalolén"),
        Comuna("13123", "Providencia"),
        Comuna("13124", "Pudahuel"),
        Comuna("13125", "Quilicura"),
        Comuna("13126", "Quinta Normal"),
        Comuna("13127", "Recoleta"),
        Comuna("13128", "Renca"),
        Comuna("13129", "San Joaquín"),
        Comuna("13130", "San Miguel"),
        Comuna("13131", "San Ramón"),
        Comuna("13132", "Vitacura"),
    ),
    "14": (
        Comuna("10501", "Valdivia"),
        Comuna("10503", "Futrono"),
        Comuna("10505", "Lago Ranco"),
        Comuna("10506", "Lanco"),
        Comuna("10510", "Paillaco"),
        Comuna("Rio", "Rio Bueno"),
    ),
    "15": (
        Comuna("01201", "Arica"),
        Comuna("01202", "Camarones"),
        Comuna("01301", "Putre"),
        Comuna("01302", "General Lagos"),
        Comuna("ARI", "Arica"),
    ),
})


def _region_key(region_id: Any) -> str:
    if region_id is None:
        return ""
    return str(region_id).strip()


def list_regions() -> List[Region]:
    """Regions in declared order."""
    return [Region(region_id, name) for region_id, name in REGIONES.items()]


def communes_for(region_id: Any) -> List[Comuna]:
    """
    Communes of a region, in display order.

    Args:
        region_id: Region identifier ("13" or 13); None or unknown ids allowed

    Returns:
        List of communes, empty when the region has none listed

    Examples:
        >>> communes_for("13")[0]
        Comuna(id='13101', name='Santiago')
        >>> communes_for("99")
        []
    """
    return list(COMUNAS_POR_REGION.get(_region_key(region_id), ()))


def region_name(region_id: Any) -> str:
    """
    Display name of a region.

    Unknown ids render as "Región <id>"; empty input renders as "N/A".
    """
    key = _region_key(region_id)
    if not key:
        return REGION_NO_DISPONIBLE
    return REGIONES.get(key, f"Región {key}")


class RegionCommuneSelection:
    """
    State of a cascading region -> commune selector.

    Changing the region always clears the selected commune and reloads the
    commune options for the new region.
    """

    def __init__(self, region: Optional[str] = None, comuna: Optional[str] = None):
        self.region: Optional[str] = None
        self.comuna: Optional[str] = None
        self.options: List[Comuna] = []

        if region:
            self.select_region(region)
        if comuna:
            self.select_comuna(comuna)

    def select_region(self, region_id: Any) -> List[Comuna]:
        """Select a region and return the new commune options."""
        key = _region_key(region_id)
        self.region = key or None
        self.comuna = None
        self.options = communes_for(key)
        return self.options

    def select_comuna(self, comuna_name: str) -> None:
        """
        Select a commune by name.

        Raises:
            ValueError: If the commune is not offered for the current region
        """
        if comuna_name not in {comuna.name for comuna in self.options}:
            raise ValueError(
                f"Comuna '{comuna_name}' no disponible para la región {self.region or 'N/A'}"
            )
        self.comuna = comuna_name

    @property
    def has_options(self) -> bool:
        return bool(self.options)
