"""Static word lists used by the detectors and the replacement generators.

All tables are tuples and never mutated after import.
"""

from __future__ import annotations
from types import MappingProxyType

FRENCH_FIRST_NAMES = (
    "Julien", "Claire", "Sophie", "Paul", "Anna",
    "Lucas", "Léa", "Théo", "Nadia", "Yanis",
)

FRENCH_LAST_NAMES = (
    "Martin", "Dubois", "Bernard", "Petit", "Leroy",
    "Garcia", "Moreau", "Lambert", "Rousseau", "Fontaine",
)

NEUTRAL_FIRST_NAMES = (
    "Alex", "Charlie", "Sasha", "Noa", "Morgan",
    "Robin", "Riley", "Eden", "Milan", "Taylor",
)

COMPANY_NAMES = (
    "Orange", "BNP Paribas", "SNCF", "Airbus", "Decathlon",
    "Capgemini", "Thales", "LVMH", "Doctolib", "BackMarket",
)

# Legal forms that turn a preceding capitalized phrase into a company
COMPANY_LEGAL_FORMS = ("SARL", "SAS", "SA", "Inc", "Corp", "Université", "Association")

COMPANY_PREFIXES = ("Société", "Groupe", "Atelier", "Maison", "Collectif", "Studio", "Laboratoire")
COMPANY_CORES = ("Orion", "Nova", "Helios", "Atlas", "Aster", "Lumen", "Orphée", "Mirage", "Ellipse", "Rivage")
COMPANY_SUFFIXES = ("Solutions", "Industries", "Conseil", "Création", "Digital", "Innovation", "Services")

CITY_NAMES = (
    "Paris", "Lyon", "Marseille", "Toulouse", "Bordeaux", "Nice",
    "Nantes", "Lille", "Strasbourg", "Grenoble", "Rennes", "Montpellier",
)

STREET_PREFIXES = ("Rue", "Boulevard", "Avenue", "Chemin", "Place", "Allée", "Quai")

PHONE_PREFIXES = ("06", "07", "01", "02", "03", "04", "05")

TYPE_LABELS = MappingProxyType({
    "person": "Personne",
    "company": "Entreprise",
    "location": "Lieu",
    "email": "Email",
    "phone": "Téléphone",
    "identifier": "Identifiant",
})
