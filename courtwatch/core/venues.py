"""Catalogue of monitored venues and their booking systems."""
from dataclasses import dataclass
from typing import Dict, List, Optional

COURTSIDE = "courtside"
CLUBSPARK = "clubspark"

COURTSIDE_BASE_URL = "https://tennistowerhamlets.com"
MAIN_LTA_HOST = "clubspark.lta.org.uk"


@dataclass(frozen=True)
class VenueConfig:
    slug: str
    name: str
    type: str
    clubspark_id: Optional[str] = None
    clubspark_host: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        data = {"slug": self.slug, "name": self.name, "type": self.type}
        if self.type == CLUBSPARK:
            data["clubsparkId"] = self.clubspark_id
            data["clubsparkHost"] = self.clubspark_host
        return data


VENUES: List[VenueConfig] = [
    # Courtside platform (Tower Hamlets)
    VenueConfig("bethnal-green-gardens", "Bethnal Green Gardens", COURTSIDE),
    VenueConfig("king-edward-memorial-park", "King Edward Memorial Park", COURTSIDE),
    VenueConfig("poplar-rec-ground", "Poplar Rec Ground", COURTSIDE),
    VenueConfig("ropemakers-field", "Ropemakers Field", COURTSIDE),
    VenueConfig("st-johns-park", "St Johns Park", COURTSIDE),
    VenueConfig("victoria-park", "Victoria Park", COURTSIDE),
    VenueConfig("wapping-gardens", "Wapping Gardens", COURTSIDE),
    # ClubSpark platform (LTA venues)
    VenueConfig(
        "stratford-park",
        "Stratford Park",
        CLUBSPARK,
        clubspark_id="stratford_newhamparkstennis_org_uk",
        clubspark_host="stratford.newhamparkstennis.org.uk",
    ),
    VenueConfig(
        "abbotts-park",
        "Abbotts Park",
        CLUBSPARK,
        clubspark_id="abbotts_playtenniswalthamforest_com",
        clubspark_host="abbotts.playtenniswalthamforest.com",
    ),
    VenueConfig(
        "west-ham-park",
        "West Ham Park",
        CLUBSPARK,
        clubspark_id="WestHamPark",
        clubspark_host=MAIN_LTA_HOST,
    ),
]

VENUES_BY_SLUG: Dict[str, VenueConfig] = {v.slug: v for v in VENUES}


def get_venue(slug: str) -> Optional[VenueConfig]:
    return VENUES_BY_SLUG.get(slug)


def get_booking_url(venue_slug: str, date: Optional[str] = None) -> str:
    """Public booking page for a venue, optionally opened on a date."""
    venue = get_venue(venue_slug)
    if venue is None:
        return "#"

    if venue.type == CLUBSPARK and venue.clubspark_host and venue.clubspark_id:
        # Only the shared LTA host carries the venue id in the path
        if venue.clubspark_host == MAIN_LTA_HOST:
            base = f"https://{venue.clubspark_host}/{venue.clubspark_id}/Booking/BookByDate"
        else:
            base = f"https://{venue.clubspark_host}/Booking/BookByDate"
        if date:
            return f"{base}#?date={date}&role=guest"
        return base

    if date:
        return f"{COURTSIDE_BASE_URL}/book/courts/{venue_slug}/{date}"
    return f"{COURTSIDE_BASE_URL}/book/courts/{venue_slug}"
