"""Immutable entity catalog: players, teams, leagues and multi-league cities.

Lookup rules:
- aliases are matched on accent-folded lowercase text
- longest alias wins; equal spans fall back to the record's ``priority``
- an alias shared by several sports is resolved by a sport keyword in the
  query, otherwise by ``priority`` (never by table order)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Union

from sportiq.shared.text import normalize_name
from sportiq.shared.types import Sport

# -- Record types --


@dataclass(frozen=True)
class PlayerRecord:
    name: str
    aliases: tuple[str, ...]
    team: str
    sport: Sport
    league: str
    priority: int = 0


@dataclass(frozen=True)
class TeamRecord:
    name: str
    aliases: tuple[str, ...]
    sport: Sport
    league: str
    priority: int = 0


@dataclass(frozen=True)
class LeagueRecord:
    name: str
    aliases: tuple[str, ...]
    sport: Sport
    priority: int = 0


@dataclass(frozen=True)
class PlaceTeam:
    """A team hosted by an ambiguous place, rendered as ``Nickname (LEAGUE)``."""

    nickname: str
    league: str
    sport: Sport


@dataclass(frozen=True)
class AmbiguousPlace:
    name: str
    aliases: tuple[str, ...]
    teams: tuple[PlaceTeam, ...]


CatalogRecord = Union[PlayerRecord, TeamRecord, LeagueRecord]


# -- Players --


def _player(
    name: str, team: str, sport: Sport, league: str, *aliases: str, priority: int = 0
) -> PlayerRecord:
    return PlayerRecord(name, aliases, team, sport, league, priority)


_BB, _AF, _HK, _SC, _EL, _MLB = (
    Sport.BASKETBALL,
    Sport.AMERICAN_FOOTBALL,
    Sport.HOCKEY,
    Sport.SOCCER,
    Sport.EUROLEAGUE,
    Sport.BASEBALL,
)

PLAYERS: tuple[PlayerRecord, ...] = (
    # NBA
    _player("LeBron James", "Los Angeles Lakers", _BB, "NBA", "lebron", "bron", "king james"),
    _player("Stephen Curry", "Golden State Warriors", _BB, "NBA", "curry", "steph", "chef curry"),
    _player("Giannis Antetokounmpo", "Milwaukee Bucks", _BB, "NBA", "giannis", "greek freak"),
    _player("Nikola Jokić", "Denver Nuggets", _BB, "NBA", "jokic", "joker"),
    _player("Luka Dončić", "Dallas Mavericks", _BB, "NBA", "luka", "doncic"),
    _player("Jayson Tatum", "Boston Celtics", _BB, "NBA", "tatum"),
    _player("Joel Embiid", "Philadelphia 76ers", _BB, "NBA", "embiid"),
    _player("Kevin Durant", "Phoenix Suns", _BB, "NBA", "durant", "kd"),
    _player("Anthony Edwards", "Minnesota Timberwolves", _BB, "NBA", "ant edwards"),
    _player("Shai Gilgeous-Alexander", "Oklahoma City Thunder", _BB, "NBA", "sga", "shai"),
    _player("Victor Wembanyama", "San Antonio Spurs", _BB, "NBA", "wemby", "wembanyama"),
    _player("Damian Lillard", "Milwaukee Bucks", _BB, "NBA", "dame", "lillard"),
    _player("Devin Booker", "Phoenix Suns", _BB, "NBA", "booker"),
    _player("Ja Morant", "Memphis Grizzlies", _BB, "NBA", "morant"),
    _player("Jalen Brunson", "New York Knicks", _BB, "NBA", "brunson"),
    _player("James Harden", "LA Clippers", _BB, "NBA", "harden"),
    _player("Kyrie Irving", "Dallas Mavericks", _BB, "NBA", "kyrie"),
    _player("Jimmy Butler", "Golden State Warriors", _BB, "NBA", "jimmy butler"),
    _player("Karl-Anthony Towns", "New York Knicks", _BB, "NBA", "karl anthony towns"),
    _player("Trae Young", "Atlanta Hawks", _BB, "NBA", "trae"),
    _player("LaMelo Ball", "Charlotte Hornets", _BB, "NBA", "lamelo"),
    _player("Tyrese Maxey", "Philadelphia 76ers", _BB, "NBA", "maxey"),
    _player("Bam Adebayo", "Miami Heat", _BB, "NBA", "adebayo"),
    _player("Russell Westbrook", "Sacramento Kings", _BB, "NBA", "westbrook"),
    # Soccer
    _player("Erling Haaland", "Manchester City", _SC, "Premier League", "haaland"),
    _player("Mohamed Salah", "Liverpool", _SC, "Premier League", "salah", "mo salah"),
    _player("Bukayo Saka", "Arsenal", _SC, "Premier League", "saka"),
    _player("Cole Palmer", "Chelsea", _SC, "Premier League", "palmer"),
    _player("Phil Foden", "Manchester City", _SC, "Premier League", "foden"),
    _player("Martin Ødegaard", "Arsenal", _SC, "Premier League", "odegaard", "martin odegaard"),
    _player("Declan Rice", "Arsenal", _SC, "Premier League"),
    _player("Son Heung-min", "Los Angeles FC", _SC, "MLS", "son heung min", "sonny"),
    _player("Ollie Watkins", "Aston Villa", _SC, "Premier League", "watkins"),
    _player("Alexander Isak", "Liverpool", _SC, "Premier League", "isak"),
    _player("Bruno Fernandes", "Manchester United", _SC, "Premier League", "bruno"),
    _player("Marcus Rashford", "Barcelona", _SC, "La Liga", "rashford"),
    _player("Virgil van Dijk", "Liverpool", _SC, "Premier League", "van dijk", "vvd"),
    _player("Vinícius Júnior", "Real Madrid", _SC, "La Liga", "vinicius", "vini", "vini jr"),
    _player("Jude Bellingham", "Real Madrid", _SC, "La Liga", "bellingham", "jude"),
    _player("Kylian Mbappé", "Real Madrid", _SC, "La Liga", "mbappe"),
    _player("Lamine Yamal", "Barcelona", _SC, "La Liga", "yamal"),
    _player("Pedri", "Barcelona", _SC, "La Liga"),
    _player("Robert Lewandowski", "Barcelona", _SC, "La Liga", "lewandowski", "lewy"),
    _player("Raphinha", "Barcelona", _SC, "La Liga"),
    _player("Harry Kane", "Bayern Munich", _SC, "Bundesliga", "kane"),
    _player("Jamal Musiala", "Bayern Munich", _SC, "Bundesliga", "musiala"),
    _player("Florian Wirtz", "Liverpool", _SC, "Premier League", "wirtz"),
    _player("Victor Osimhen", "Galatasaray", _SC, "Super Lig", "osimhen"),
    _player("Lautaro Martínez", "Inter Milan", _SC, "Serie A", "lautaro"),
    _player("Dušan Vlahović", "Juventus", _SC, "Serie A", "vlahovic"),
    _player("Rafael Leão", "AC Milan", _SC, "Serie A", "leao"),
    _player("Ousmane Dembélé", "PSG", _SC, "Ligue 1", "dembele"),
    _player("Bradley Barcola", "PSG", _SC, "Ligue 1", "barcola"),
    _player("Lionel Messi", "Inter Miami", _SC, "MLS", "messi"),
    _player("Cristiano Ronaldo", "Al-Nassr", _SC, "Saudi Pro League", "ronaldo", "cr7"),
    _player("Neymar Jr", "Santos", _SC, "Brasileirão", "neymar"),
    _player("Kevin De Bruyne", "Napoli", _SC, "Serie A", "de bruyne", "kdb"),
    # NFL
    _player("Patrick Mahomes", "Kansas City Chiefs", _AF, "NFL", "mahomes"),
    _player("Joe Burrow", "Cincinnati Bengals", _AF, "NFL", "burrow"),
    _player("Josh Allen", "Buffalo Bills", _AF, "NFL"),
    _player("Lamar Jackson", "Baltimore Ravens", _AF, "NFL", "lamar"),
    _player("Travis Kelce", "Kansas City Chiefs", _AF, "NFL", "kelce"),
    _player("Tyreek Hill", "Miami Dolphins", _AF, "NFL", "tyreek"),
    _player("Stefon Diggs", "New England Patriots", _AF, "NFL", "diggs"),
    _player("Justin Jefferson", "Minnesota Vikings", _AF, "NFL", "jefferson"),
    _player("Ja'Marr Chase", "Cincinnati Bengals", _AF, "NFL", "jamarr chase"),
    _player("Jalen Hurts", "Philadelphia Eagles", _AF, "NFL", "hurts"),
    _player("Derrick Henry", "Baltimore Ravens", _AF, "NFL"),
    _player("Christian McCaffrey", "San Francisco 49ers", _AF, "NFL", "mccaffrey", "cmc"),
    _player("Nick Bosa", "San Francisco 49ers", _AF, "NFL", "bosa"),
    _player("Micah Parsons", "Green Bay Packers", _AF, "NFL", "micah", "parsons"),
    _player("C.J. Stroud", "Houston Texans", _AF, "NFL", "stroud", "cj stroud"),
    _player("Brock Purdy", "San Francisco 49ers", _AF, "NFL", "purdy"),
    # NHL
    _player("Connor McDavid", "Edmonton Oilers", _HK, "NHL", "mcdavid"),
    _player("Alex Ovechkin", "Washington Capitals", _HK, "NHL", "ovechkin", "ovi"),
    _player("Sidney Crosby", "Pittsburgh Penguins", _HK, "NHL", "crosby"),
    _player("Auston Matthews", "Toronto Maple Leafs", _HK, "NHL", "matthews"),
    _player("Leon Draisaitl", "Edmonton Oilers", _HK, "NHL", "draisaitl"),
    _player("Cale Makar", "Colorado Avalanche", _HK, "NHL", "makar"),
    _player("Nathan MacKinnon", "Colorado Avalanche", _HK, "NHL", "mackinnon"),
    _player("Nikita Kucherov", "Tampa Bay Lightning", _HK, "NHL", "kucherov"),
    _player("Artemi Panarin", "New York Rangers", _HK, "NHL", "panarin"),
    _player("Jack Hughes", "New Jersey Devils", _HK, "NHL", "hughes"),
    _player("Connor Bedard", "Chicago Blackhawks", _HK, "NHL", "bedard"),
    # EuroLeague
    _player("Kostas Sloukas", "Panathinaikos", _EL, "EuroLeague", "sloukas"),
    _player("Kendrick Nunn", "Panathinaikos", _EL, "EuroLeague", "nunn"),
    _player("Mario Hezonja", "Real Madrid", _EL, "EuroLeague", "hezonja"),
    _player("Facundo Campazzo", "Real Madrid", _EL, "EuroLeague", "campazzo"),
    _player("Walter Tavares", "Real Madrid", _EL, "EuroLeague", "tavares"),
    _player("Jan Veselý", "Barcelona", _EL, "EuroLeague", "vesely"),
    _player("Nikola Mirotić", "Olimpia Milano", _EL, "EuroLeague", "mirotic"),
    _player("Sasha Vezenkov", "Olympiacos", _EL, "EuroLeague", "vezenkov"),
    _player("Evan Fournier", "Olympiacos", _EL, "EuroLeague", "fournier"),
)


# -- Teams --


def _team(
    name: str, sport: Sport, league: str, *aliases: str, priority: int = 0
) -> TeamRecord:
    return TeamRecord(name, aliases, sport, league, priority)


TEAMS: tuple[TeamRecord, ...] = (
    # NBA
    _team("Atlanta Hawks", _BB, "NBA", "hawks", priority=1),
    _team("Boston Celtics", _BB, "NBA", "celtics", "celts"),
    _team("Brooklyn Nets", _BB, "NBA", "nets"),
    _team("Charlotte Hornets", _BB, "NBA", "hornets"),
    _team("Chicago Bulls", _BB, "NBA", "bulls"),
    _team("Cleveland Cavaliers", _BB, "NBA", "cavaliers", "cavs"),
    _team("Dallas Mavericks", _BB, "NBA", "mavericks", "maverick", "mavs"),
    _team("Denver Nuggets", _BB, "NBA", "nuggets"),
    _team("Detroit Pistons", _BB, "NBA", "pistons"),
    _team("Golden State Warriors", _BB, "NBA", "warriors", "golden state", "dubs"),
    _team("Houston Rockets", _BB, "NBA", "rockets"),
    _team("Indiana Pacers", _BB, "NBA", "pacers"),
    _team("LA Clippers", _BB, "NBA", "clippers", "los angeles clippers"),
    _team("Los Angeles Lakers", _BB, "NBA", "lakers", "la lakers"),
    _team("Memphis Grizzlies", _BB, "NBA", "grizzlies", "grizz"),
    _team("Miami Heat", _BB, "NBA", "heat"),
    _team("Milwaukee Bucks", _BB, "NBA", "bucks"),
    _team("Minnesota Timberwolves", _BB, "NBA", "timberwolves", "wolves", priority=1),
    _team("New Orleans Pelicans", _BB, "NBA", "pelicans", "pels"),
    _team("New York Knicks", _BB, "NBA", "knicks"),
    _team("Oklahoma City Thunder", _BB, "NBA", "thunder", "okc"),
    _team("Orlando Magic", _BB, "NBA", "magic"),
    _team("Philadelphia 76ers", _BB, "NBA", "76ers", "sixers"),
    _team("Phoenix Suns", _BB, "NBA", "suns"),
    _team("Portland Trail Blazers", _BB, "NBA", "trail blazers", "trailblazers", "blazers"),
    _team("Sacramento Kings", _BB, "NBA", "kings", priority=1),
    _team("San Antonio Spurs", _BB, "NBA", "spurs", priority=1),
    _team("Toronto Raptors", _BB, "NBA", "raptors"),
    _team("Utah Jazz", _BB, "NBA", "jazz"),
    _team("Washington Wizards", _BB, "NBA", "wizards"),
    # NFL
    _team("Arizona Cardinals", _AF, "NFL", "cardinals", "cards", priority=1),
    _team("Atlanta Falcons", _AF, "NFL", "falcons"),
    _team("Baltimore Ravens", _AF, "NFL", "ravens"),
    _team("Buffalo Bills", _AF, "NFL", "bills"),
    _team("Carolina Panthers", _AF, "NFL", "panthers", priority=1),
    _team("Chicago Bears", _AF, "NFL", "bears"),
    _team("Cincinnati Bengals", _AF, "NFL", "bengals"),
    _team("Cleveland Browns", _AF, "NFL", "browns"),
    _team("Dallas Cowboys", _AF, "NFL", "cowboys"),
    _team("Denver Broncos", _AF, "NFL", "broncos"),
    _team("Detroit Lions", _AF, "NFL", "lions"),
    _team("Green Bay Packers", _AF, "NFL", "packers"),
    _team("Houston Texans", _AF, "NFL", "texans"),
    _team("Indianapolis Colts", _AF, "NFL", "colts"),
    _team("Jacksonville Jaguars", _AF, "NFL", "jaguars", "jags"),
    _team("Kansas City Chiefs", _AF, "NFL", "chiefs"),
    _team("Las Vegas Raiders", _AF, "NFL", "raiders"),
    _team("Los Angeles Chargers", _AF, "NFL", "chargers"),
    _team("Los Angeles Rams", _AF, "NFL", "rams"),
    _team("Miami Dolphins", _AF, "NFL", "dolphins"),
    _team("Minnesota Vikings", _AF, "NFL", "vikings"),
    _team("New England Patriots", _AF, "NFL", "patriots", "pats"),
    _team("New Orleans Saints", _AF, "NFL", "saints"),
    _team("New York Giants", _AF, "NFL", "giants", priority=1),
    _team("New York Jets", _AF, "NFL", "jets", priority=1),
    _team("Philadelphia Eagles", _AF, "NFL", "eagles"),
    _team("Pittsburgh Steelers", _AF, "NFL", "steelers"),
    _team("San Francisco 49ers", _AF, "NFL", "49ers", "niners"),
    _team("Seattle Seahawks", _AF, "NFL", "seahawks"),
    _team("Tampa Bay Buccaneers", _AF, "NFL", "buccaneers", "bucs"),
    _team("Tennessee Titans", _AF, "NFL", "titans"),
    _team("Washington Commanders", _AF, "NFL", "commanders"),
    # NHL
    _team("Anaheim Ducks", _HK, "NHL", "ducks"),
    _team("Boston Bruins", _HK, "NHL", "bruins"),
    _team("Buffalo Sabres", _HK, "NHL", "sabres"),
    _team("Calgary Flames", _HK, "NHL", "flames"),
    _team("Carolina Hurricanes", _HK, "NHL", "hurricanes", "canes"),
    _team("Chicago Blackhawks", _HK, "NHL", "blackhawks", "hawks"),
    _team("Colorado Avalanche", _HK, "NHL", "avalanche", "avs"),
    _team("Columbus Blue Jackets", _HK, "NHL", "blue jackets"),
    _team("Dallas Stars", _HK, "NHL", "stars"),
    _team("Detroit Red Wings", _HK, "NHL", "red wings"),
    _team("Edmonton Oilers", _HK, "NHL", "oilers"),
    _team("Florida Panthers", _HK, "NHL", "panthers"),
    _team("Los Angeles Kings", _HK, "NHL", "kings", "la kings"),
    _team("Minnesota Wild", _HK, "NHL", "wild"),
    _team("Montreal Canadiens", _HK, "NHL", "canadiens", "habs"),
    _team("Nashville Predators", _HK, "NHL", "predators", "preds"),
    _team("New Jersey Devils", _HK, "NHL", "devils"),
    _team("New York Islanders", _HK, "NHL", "islanders", "isles"),
    _team("New York Rangers", _HK, "NHL", "rangers", priority=1),
    _team("Ottawa Senators", _HK, "NHL", "senators", "sens"),
    _team("Philadelphia Flyers", _HK, "NHL", "flyers"),
    _team("Pittsburgh Penguins", _HK, "NHL", "penguins", "pens"),
    _team("San Jose Sharks", _HK, "NHL", "sharks"),
    _team("Seattle Kraken", _HK, "NHL", "kraken"),
    _team("St. Louis Blues", _HK, "NHL", "blues", "st louis blues"),
    _team("Tampa Bay Lightning", _HK, "NHL", "lightning", "bolts"),
    _team("Toronto Maple Leafs", _HK, "NHL", "maple leafs", "leafs"),
    _team("Vancouver Canucks", _HK, "NHL", "canucks"),
    _team("Vegas Golden Knights", _HK, "NHL", "golden knights", "knights"),
    _team("Washington Capitals", _HK, "NHL", "capitals", "caps"),
    _team("Winnipeg Jets", _HK, "NHL", "jets"),
    # MLB
    _team("Arizona Diamondbacks", _MLB, "MLB", "diamondbacks", "d-backs", "dbacks"),
    _team("Atlanta Braves", _MLB, "MLB", "braves"),
    _team("Baltimore Orioles", _MLB, "MLB", "orioles"),
    _team("Boston Red Sox", _MLB, "MLB", "red sox"),
    _team("Chicago Cubs", _MLB, "MLB", "cubs"),
    _team("Chicago White Sox", _MLB, "MLB", "white sox"),
    _team("Cincinnati Reds", _MLB, "MLB", "reds"),
    _team("Cleveland Guardians", _MLB, "MLB", "guardians"),
    _team("Colorado Rockies", _MLB, "MLB", "rockies"),
    _team("Detroit Tigers", _MLB, "MLB", "tigers"),
    _team("Houston Astros", _MLB, "MLB", "astros"),
    _team("Kansas City Royals", _MLB, "MLB", "royals"),
    _team("Los Angeles Angels", _MLB, "MLB", "angels"),
    _team("Los Angeles Dodgers", _MLB, "MLB", "dodgers"),
    _team("Miami Marlins", _MLB, "MLB", "marlins"),
    _team("Milwaukee Brewers", _MLB, "MLB", "brewers"),
    _team("Minnesota Twins", _MLB, "MLB", "twins"),
    _team("New York Mets", _MLB, "MLB", "mets"),
    _team("New York Yankees", _MLB, "MLB", "yankees", "yanks"),
    _team("Athletics", _MLB, "MLB", "oakland athletics", "oakland a's"),
    _team("Philadelphia Phillies", _MLB, "MLB", "phillies"),
    _team("Pittsburgh Pirates", _MLB, "MLB", "pirates"),
    _team("San Diego Padres", _MLB, "MLB", "padres"),
    _team("San Francisco Giants", _MLB, "MLB", "giants", "sf giants"),
    _team("Seattle Mariners", _MLB, "MLB", "mariners"),
    _team("St. Louis Cardinals", _MLB, "MLB", "cardinals", "st louis cardinals"),
    _team("Tampa Bay Rays", _MLB, "MLB", "rays"),
    _team("Texas Rangers", _MLB, "MLB", "rangers"),
    _team("Toronto Blue Jays", _MLB, "MLB", "blue jays", "jays"),
    _team("Washington Nationals", _MLB, "MLB", "nationals", "nats"),
    # Soccer: Premier League
    _team("Arsenal", _SC, "Premier League", "gunners"),
    _team("Aston Villa", _SC, "Premier League"),
    _team("Bournemouth", _SC, "Premier League"),
    _team("Brentford", _SC, "Premier League"),
    _team("Brighton", _SC, "Premier League"),
    _team("Chelsea", _SC, "Premier League"),
    _team("Crystal Palace", _SC, "Premier League"),
    _team("Everton", _SC, "Premier League"),
    _team("Fulham", _SC, "Premier League"),
    _team("Leeds United", _SC, "Premier League", "leeds"),
    _team("Liverpool", _SC, "Premier League"),
    _team("Manchester City", _SC, "Premier League", "man city"),
    _team("Manchester United", _SC, "Premier League", "man united", "man utd", "mufc"),
    _team("Newcastle United", _SC, "Premier League", "newcastle"),
    _team("Nottingham Forest", _SC, "Premier League"),
    _team("Sunderland", _SC, "Premier League"),
    _team("Tottenham Hotspur", _SC, "Premier League", "tottenham", "spurs"),
    _team("West Ham United", _SC, "Premier League", "west ham"),
    _team("Wolverhampton Wanderers", _SC, "Premier League", "wolverhampton", "wolves"),
    _team("Leicester City", _SC, "Championship", "leicester"),
    # Soccer: continental
    _team("Real Madrid", _SC, "La Liga", priority=1),
    _team("Barcelona", _SC, "La Liga", "barca", "fc barcelona", priority=1),
    _team("Atlético Madrid", _SC, "La Liga", "atletico"),
    _team("Bayern Munich", _SC, "Bundesliga", "bayern", priority=1),
    _team("Borussia Dortmund", _SC, "Bundesliga", "dortmund", "bvb"),
    _team("Bayer Leverkusen", _SC, "Bundesliga", "leverkusen"),
    _team("Paris Saint-Germain", _SC, "Ligue 1", "psg", "paris sg"),
    # Soccer: Serie A
    _team("AS Roma", _SC, "Serie A", "roma"),
    _team("Lazio", _SC, "Serie A"),
    _team("Napoli", _SC, "Serie A"),
    _team("Juventus", _SC, "Serie A", "juve"),
    _team("Inter Milan", _SC, "Serie A", "inter"),
    _team("AC Milan", _SC, "Serie A", "milan", priority=1),
    _team("Atalanta", _SC, "Serie A"),
    _team("Fiorentina", _SC, "Serie A"),
    _team("Torino", _SC, "Serie A"),
    _team("Bologna", _SC, "Serie A"),
    _team("Sassuolo", _SC, "Serie A"),
    _team("Udinese", _SC, "Serie A"),
    _team("Cagliari", _SC, "Serie A"),
    _team("Hellas Verona", _SC, "Serie A", "verona"),
    _team("Lecce", _SC, "Serie A"),
    _team("Genoa", _SC, "Serie A"),
    _team("Parma", _SC, "Serie A"),
    _team("Como", _SC, "Serie A"),
    # EuroLeague
    _team("Real Madrid", _EL, "EuroLeague"),
    _team("Barcelona", _EL, "EuroLeague", "barca"),
    _team("Bayern Munich", _EL, "EuroLeague", "bayern"),
    _team("Olimpia Milano", _EL, "EuroLeague", "milan", "armani milan"),
    _team("Fenerbahçe", _EL, "EuroLeague", "fenerbahce"),
    _team("Olympiacos", _EL, "EuroLeague"),
    _team("Panathinaikos", _EL, "EuroLeague", "pao"),
    _team("Maccabi Tel Aviv", _EL, "EuroLeague", "maccabi"),
    _team("Anadolu Efes", _EL, "EuroLeague", "efes"),
    _team("Partizan", _EL, "EuroLeague"),
    _team("Virtus Bologna", _EL, "EuroLeague", "virtus"),
    _team("AS Monaco", _EL, "EuroLeague", "monaco"),
    _team("Žalgiris Kaunas", _EL, "EuroLeague", "zalgiris"),
    _team("Baskonia", _EL, "EuroLeague"),
    _team("Valencia Basket", _EL, "EuroLeague", "valencia"),
)


# -- Leagues --

LEAGUES: tuple[LeagueRecord, ...] = (
    LeagueRecord("NBA", ("nba",), _BB),
    LeagueRecord("NFL", ("nfl",), _AF),
    LeagueRecord("NHL", ("nhl",), _HK),
    LeagueRecord("MLB", ("mlb",), Sport.BASEBALL),
    LeagueRecord("Premier League", ("premier league", "epl"), _SC),
    LeagueRecord("La Liga", ("la liga", "laliga"), _SC),
    LeagueRecord("Serie A", ("serie a",), _SC),
    LeagueRecord("Bundesliga", ("bundesliga",), _SC),
    LeagueRecord("Ligue 1", ("ligue 1",), _SC),
    LeagueRecord("Champions League", ("champions league", "ucl"), _SC),
    LeagueRecord("MLS", ("mls",), _SC),
    LeagueRecord("EuroLeague", ("euroleague", "euro league"), _EL),
)


# -- Places hosting teams in several leagues --


def _place(
    name: str, aliases: tuple[str, ...], *teams: tuple[str, str, Sport]
) -> AmbiguousPlace:
    return AmbiguousPlace(name, aliases, tuple(PlaceTeam(*t) for t in teams))


AMBIGUOUS_PLACES: tuple[AmbiguousPlace, ...] = (
    _place("Dallas", ("dallas",), ("Mavericks", "NBA", _BB), ("Cowboys", "NFL", _AF), ("Stars", "NHL", _HK)),
    _place("Chicago", ("chicago",), ("Bulls", "NBA", _BB), ("Bears", "NFL", _AF), ("Blackhawks", "NHL", _HK)),
    _place("Boston", ("boston",), ("Celtics", "NBA", _BB), ("Patriots", "NFL", _AF), ("Bruins", "NHL", _HK)),
    _place("New York", ("new york", "nyc"), ("Knicks", "NBA", _BB), ("Giants", "NFL", _AF), ("Rangers", "NHL", _HK)),
    _place("Los Angeles", ("los angeles", "l.a."), ("Lakers", "NBA", _BB), ("Rams", "NFL", _AF), ("Kings", "NHL", _HK)),
    _place("Miami", ("miami",), ("Heat", "NBA", _BB), ("Dolphins", "NFL", _AF), ("Panthers", "NHL", _HK)),
    _place("Denver", ("denver",), ("Nuggets", "NBA", _BB), ("Broncos", "NFL", _AF), ("Avalanche", "NHL", _HK)),
    _place("Philadelphia", ("philadelphia", "philly"), ("76ers", "NBA", _BB), ("Eagles", "NFL", _AF), ("Flyers", "NHL", _HK)),
    _place("Detroit", ("detroit",), ("Pistons", "NBA", _BB), ("Lions", "NFL", _AF), ("Red Wings", "NHL", _HK)),
    _place("Washington", ("washington",), ("Wizards", "NBA", _BB), ("Commanders", "NFL", _AF), ("Capitals", "NHL", _HK)),
    _place("Minnesota", ("minnesota",), ("Timberwolves", "NBA", _BB), ("Vikings", "NFL", _AF), ("Wild", "NHL", _HK)),
    _place("Pittsburgh", ("pittsburgh",), ("Steelers", "NFL", _AF), ("Penguins", "NHL", _HK)),
)


# -- Sport keywords (used to pick between records sharing an alias) --

SPORT_KEYWORDS: MappingProxyType[Sport, tuple[str, ...]] = MappingProxyType(
    {
        Sport.BASKETBALL: ("nba", "basketball", "hoops"),
        Sport.AMERICAN_FOOTBALL: ("nfl", "american football", "football", "super bowl", "superbowl", "touchdown", "quarterback"),
        Sport.HOCKEY: ("nhl", "hockey", "stanley cup", "puck"),
        Sport.SOCCER: (
            "soccer", "premier league", "epl", "la liga", "serie a", "bundesliga",
            "ligue 1", "champions league", "ucl", "mls",
        ),
        Sport.EUROLEAGUE: ("euroleague", "euro league", "eurobasket"),
        Sport.BASEBALL: ("mlb", "baseball"),
    }
)

# League word -> sport, for clarification follow-ups ("nba", "hockey").
LEAGUE_WORDS: MappingProxyType[str, tuple[str, Sport]] = MappingProxyType(
    {
        "nba": ("NBA", _BB),
        "basketball": ("NBA", _BB),
        "nfl": ("NFL", _AF),
        "football": ("NFL", _AF),
        "american football": ("NFL", _AF),
        "nhl": ("NHL", _HK),
        "hockey": ("NHL", _HK),
    }
)


# -- Indexes --


def _record_key(record: CatalogRecord) -> tuple[int, str]:
    return (-record.priority, record.name)


def _build_index(
    records: tuple[CatalogRecord, ...],
) -> MappingProxyType[str, tuple[CatalogRecord, ...]]:
    index: dict[str, list[CatalogRecord]] = {}
    for record in records:
        for alias in {normalize_name(a) for a in (record.name, *record.aliases)}:
            index.setdefault(alias, []).append(record)
    return MappingProxyType(
        {alias: tuple(sorted(recs, key=_record_key)) for alias, recs in index.items()}
    )


def _alternation(aliases: list[str]) -> re.Pattern[str]:
    # Longest alias first so each start position yields its longest match
    ordered = sorted(aliases, key=lambda a: (-len(a), a))
    body = "|".join(re.escape(a) for a in ordered)
    return re.compile(rf"(?=(?<!\w)({body})(?!\w))")


ALIAS_INDEX = _build_index((*PLAYERS, *TEAMS, *LEAGUES))
ALIAS_PATTERN = _alternation(list(ALIAS_INDEX))

PLACE_INDEX: MappingProxyType[str, AmbiguousPlace] = MappingProxyType(
    {normalize_name(alias): place for place in AMBIGUOUS_PLACES for alias in place.aliases}
)
PLACE_PATTERN = _alternation(list(PLACE_INDEX))

SPORT_KEYWORD_PATTERNS: MappingProxyType[Sport, re.Pattern[str]] = MappingProxyType(
    {
        sport: re.compile(r"(?<!\w)(?:" + "|".join(re.escape(k) for k in words) + r")(?!\w)")
        for sport, words in SPORT_KEYWORDS.items()
    }
)


def lookup(alias: str) -> tuple[CatalogRecord, ...]:
    """Records registered under an alias (folded), best first."""
    return ALIAS_INDEX.get(normalize_name(alias), ())


def mentioned_sports(folded_text: str) -> frozenset[Sport]:
    """Sports whose keywords appear in already-folded text."""
    return frozenset(
        sport for sport, pattern in SPORT_KEYWORD_PATTERNS.items() if pattern.search(folded_text)
    )


def pick_record(
    records: tuple[CatalogRecord, ...], sports: frozenset[Sport]
) -> CatalogRecord:
    """Choose among records sharing an alias: sport keyword first, then priority."""
    if len(records) > 1 and sports:
        for record in records:
            if record.sport in sports:
                return record
    return records[0]
