
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Callable, Dict, Optional, Pattern, Union
import re
import yaml, pathlib
from .runners.runner import SuiteStats
from .reporters.builder import ERROR_SETTERS

@dataclass
class SuiteNameContext:
    name: str
    suite: SuiteStats

@dataclass
class ClassNameContext:
    package_name: str
    suite: SuiteStats

SuiteNameFormatter = Callable[[SuiteNameContext], str]
ClassNameFormatter = Callable[[ClassNameContext], str]

class ReporterOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True, extra="forbid")

    suite_name_format: Optional[Union[Pattern, SuiteNameFormatter]] = Field(
        None, alias="suiteNameFormat", description="Separator pattern or callable producing the suite name")
    class_name_format: Optional[ClassNameFormatter] = Field(
        None, alias="classNameFormat", description="Callable producing the testcase classname")
    package_name: Optional[str] = Field(None, alias="packageName", description="Overrides the classname prefix")
    add_file_attribute: bool = Field(False, alias="addFileAttribute")
    error_options: Optional[Dict[str, str]] = Field(
        None, alias="errorOptions", description="testcase attribute -> error field, e.g. {error: message}")
    output_dir: Optional[str] = Field(None, alias="outputDir", description="Directory for the XML report; stdout if unset")
    output_file_format: Union[str, Callable[[Dict[str, Any]], str]] = Field(
        "wdio-{cid}-junit-reporter.xml", alias="outputFileFormat")
    log_level: str = Field("INFO", alias="logLevel")

    @field_validator("suite_name_format", mode="before")
    @classmethod
    def _compile_pattern(cls, v):
        if isinstance(v, str):
            try:
                return re.compile(v)
            except re.error as e:
                raise ValueError(f"invalid suiteNameFormat pattern {v!r}: {e}") from e
        return v

    @field_validator("error_options")
    @classmethod
    def _known_setters(cls, v):
        if v:
            unknown = sorted(set(v) - set(ERROR_SETTERS))
            if unknown:
                raise ValueError(f"unknown errorOptions keys {unknown}; expected one of {sorted(ERROR_SETTERS)}")
        return v

def load_config(path: Optional[str]) -> ReporterOptions:
    if not path:
        return ReporterOptions()
    data = yaml.safe_load(pathlib.Path(path).read_text()) or {}
    return ReporterOptions.model_validate(data)
