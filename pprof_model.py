"""
In-memory pprof profile model produced by the CSV conversion.

The model mirrors the parts of the pprof schema that csv2pprof fills in:
sample types, samples, functions, locations and comments. Encoding to the
protobuf wire format lives in pprof_encode.
"""

from dataclasses import dataclass, field

import pandas as pd


class ConversionError(Exception):
    """Base class for every error raised while converting a CSV table."""


@dataclass(frozen=True)
class ValueType:
    type: str
    unit: str

    @property
    def label(self):
        return f"{self.type}/{self.unit}"


@dataclass(frozen=True)
class Function:
    id: int
    name: str


@dataclass(frozen=True)
class Location:
    id: int
    function: Function

    @property
    def name(self):
        return self.function.name


@dataclass
class Sample:
    locations: list = field(default_factory=list)
    values: list = field(default_factory=list)

    @property
    def stack(self):
        return [loc.name for loc in self.locations]


@dataclass
class Profile:
    sample_types: list = field(default_factory=list)
    samples: list = field(default_factory=list)
    functions: list = field(default_factory=list)
    locations: list = field(default_factory=list)
    comments: list = field(default_factory=list)

    def to_dict(self):
        """
        Render the profile as plain JSON-ready data.
        Samples reference locations by id, locations reference functions by id.
        """
        return {
            "comments": list(self.comments),
            "sample_types": [{"type": vt.type, "unit": vt.unit} for vt in self.sample_types],
            "functions": [{"id": fn.id, "name": fn.name} for fn in self.functions],
            "locations": [{"id": loc.id, "function_id": loc.function.id} for loc in self.locations],
            "samples": [
                {
                    "location_ids": [loc.id for loc in sample.locations],
                    "values": list(sample.values),
                }
                for sample in self.samples
            ],
        }

    def to_dataframe(self):
        """
        One row per sample: the stack joined with ';' and one int64 column per
        sample type, labelled 'type/unit'. Rows keep input order.
        """
        labels = [vt.label for vt in self.sample_types]
        df = pd.DataFrame([list(sample.values) for sample in self.samples],
                          columns=labels, dtype="int64")
        df.insert(0, "stack", [";".join(sample.stack) for sample in self.samples])
        return df
