"""
Static onboarding reference data: ecological interests and the activity
catalog. Not fetched from the store.
"""

from typing import Iterable, List

from ecolink.models.onboarding import Activity, ActivitySplit, Interest

INTERESTS: List[Interest] = [
    Interest(id="recycling", name="Recyclage & Déchets"),
    Interest(id="transport", name="Transport Vert"),
    Interest(id="energy", name="Énergies Renouvelables"),
    Interest(id="home", name="Maison Écologique"),
    Interest(id="food", name="Alimentation Durable"),
    Interest(id="electric", name="Véhicules Électriques"),
    Interest(id="efficiency", name="Efficacité Énergétique"),
    Interest(id="nature", name="Protection Nature"),
    Interest(id="water", name="Gestion de l'Eau"),
    Interest(id="air", name="Qualité de l'Air"),
    Interest(id="biodiversity", name="Biodiversité"),
    Interest(id="garden", name="Jardinage Écologique"),
]

ACTIVITIES: List[Activity] = [
    Activity(
        id="bike-tour",
        title="Balade à vélo écologique",
        description="Découverte des pistes cyclables de la ville",
        location="Centre-ville, Tunis",
        date="Samedi 15 juillet",
        time="09:00 - 12:00",
        participants=12,
        max_participants=20,
        difficulty="Facile",
        category="transport",
        tags=["Transport vert", "Sport", "Découverte"],
    ),
    Activity(
        id="tree-planting",
        title="Plantation d'arbres communautaire",
        description="Participation à la reforestation urbaine",
        location="Parc Belvédère, Tunis",
        date="Dimanche 16 juillet",
        time="08:00 - 11:00",
        participants=25,
        max_participants=50,
        difficulty="Modéré",
        category="nature",
        tags=["Reforestation", "Communauté", "Nature"],
    ),
    Activity(
        id="recycling-workshop",
        title="Atelier de recyclage créatif",
        description="Apprenez à transformer vos déchets en objets utiles",
        location="Centre culturel, Sfax",
        date="Mercredi 19 juillet",
        time="14:00 - 17:00",
        participants=8,
        max_participants=15,
        difficulty="Facile",
        category="recycling",
        tags=["DIY", "Recyclage", "Créativité"],
    ),
    Activity(
        id="organic-cooking",
        title="Cours de cuisine bio locale",
        description="Cuisiner avec des produits locaux et de saison",
        location="Ferme bio, Monastir",
        date="Samedi 22 juillet",
        time="10:00 - 14:00",
        participants=6,
        max_participants=12,
        difficulty="Facile",
        category="food",
        tags=["Bio", "Local", "Cuisine"],
    ),
    Activity(
        id="urban-garden",
        title="Jardinage urbain participatif",
        description="Création d'un potager communautaire",
        location="Quartier Manouba",
        date="Samedi 29 juillet",
        time="08:00 - 12:00",
        participants=15,
        max_participants=25,
        difficulty="Modéré",
        category="garden",
        tags=["Jardinage", "Communauté", "Légumes"],
    ),
    Activity(
        id="eco-cleanup",
        title="Nettoyage écologique des plages",
        description="Protection du littoral méditerranéen",
        location="Plage de Hammamet",
        date="Dimanche 30 juillet",
        time="07:00 - 10:00",
        participants=30,
        max_participants=60,
        difficulty="Facile",
        category="nature",
        tags=["Nettoyage", "Plage", "Protection"],
    ),
]

INTEREST_IDS = frozenset(interest.id for interest in INTERESTS)
ACTIVITY_IDS = frozenset(activity.id for activity in ACTIVITIES)


def split_activities(interests: Iterable[str]) -> ActivitySplit:
    """
    Partition the catalog by the user's interests.

    recommended: activity.category in interests
    other:       everything else
    Catalog order is kept inside each group.
    """
    selected = set(interests)
    return ActivitySplit(
        recommended=[a for a in ACTIVITIES if a.category in selected],
        other=[a for a in ACTIVITIES if a.category not in selected],
    )
