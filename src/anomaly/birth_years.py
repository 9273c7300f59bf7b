# src/anomaly/birth_years.py — v1
"""Known birth years for actors and directors, used by the actor-age check."""

from __future__ import annotations

DEFAULT_BIRTH_YEARS: dict[str, int] = {
    # Legends
    "Akkineni Nageswara Rao": 1923,
    "ANR": 1923,
    "Nageshwara Rao": 1923,
    "N. T. Rama Rao": 1923,
    "NTR": 1923,
    "Savitri": 1935,
    "S. V. Ranga Rao": 1918,
    "Ghantasala": 1922,
    "Relangi": 1910,
    "Sobhan Babu": 1937,
    "Krishna": 1943,
    "Superstar Krishna": 1943,
    # Classic era
    "Chiranjeevi": 1955,
    "Venkatesh": 1960,
    "Balakrishna": 1960,
    "Nagarjuna": 1959,
    "Mohan Babu": 1952,
    "Rajendra Prasad": 1956,
    "Jagapathi Babu": 1962,
    "Srikanth": 1968,
    # Current generation
    "Mahesh Babu": 1975,
    "Pawan Kalyan": 1971,
    "Jr. NTR": 1983,
    "Allu Arjun": 1982,
    "Ram Charan": 1985,
    "Prabhas": 1979,
    "Ravi Teja": 1968,
    "Nani": 1984,
    "Vijay Deverakonda": 1989,
    "Ram Pothineni": 1988,
    "Sai Dharam Tej": 1986,
    "Sharwanand": 1984,
    "Nithin": 1983,
    "Varun Tej": 1990,
    # Heroines
    "Jayasudha": 1958,
    "Sridevi": 1963,
    "Jayaprada": 1962,
    "Radhika": 1965,
    "Samantha": 1987,
    "Anushka Shetty": 1981,
    "Trisha": 1983,
    "Tamannaah": 1989,
    "Kajal Aggarwal": 1985,
    "Nayanthara": 1984,
    "Rashmika Mandanna": 1996,
    "Pooja Hegde": 1990,
    # Directors
    "K. Viswanath": 1930,
    "Bapu": 1933,
    "K. Raghavendra Rao": 1942,
    "S.S. Rajamouli": 1973,
    "Sukumar": 1970,
    "Trivikram": 1972,
    "Koratala Siva": 1975,
    "Vamsi Paidipally": 1978,
}


class BirthYearRegistry:
    """Name -> birth year lookup with exact then substring matching.

    Each registry owns its table; the module default is copied, never shared.
    """

    def __init__(self, birth_years: dict[str, int] | None = None) -> None:
        self._years = dict(DEFAULT_BIRTH_YEARS if birth_years is None else birth_years)

    def __len__(self) -> int:
        return len(self._years)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.lookup(name) is not None

    def lookup(self, name: str) -> int | None:
        """Birth year for ``name``, or None when unknown."""
        normalized = name.strip()
        if not normalized:
            return None
        if normalized in self._years:
            return self._years[normalized]
        for known, year in self._years.items():
            if known in normalized or normalized in known:
                return year
        return None

    def add(self, name: str, birth_year: int) -> None:
        self._years[name.strip()] = birth_year
