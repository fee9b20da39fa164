"""
Pydantic schemas for the inputs of registry operations.
Values arrive already validated by the calling layer.
"""
from pydantic import BaseModel, Field
from typing import List, Literal, Optional, Dict, Any


class VersionDescriptor(BaseModel):
    """A single version to publish."""
    semver: str
    license: Optional[str] = None
    engine: Dict[str, Any] = Field(default_factory=dict)
    meta: Dict[str, Any] = Field(default_factory=dict)
    tarball_url: Optional[str] = None
    sha: Optional[str] = None

    def version_meta(self) -> Dict[str, Any]:
        """Per-version metadata with the tarball reference folded in."""
        meta = dict(self.meta)
        if self.tarball_url or self.sha:
            dist = dict(meta.get("dist") or {})
            if self.tarball_url:
                dist["tarball"] = self.tarball_url
            if self.sha:
                dist["sha"] = self.sha
            meta["dist"] = dist
        return meta


class NewPackage(BaseModel):
    """Everything needed to create a package together with its versions."""
    name: str
    repository: Dict[str, Any] = Field(default_factory=dict)
    readme: Optional[str] = None
    creation_method: Optional[str] = None
    owner: Optional[str] = None
    package_type: Optional[Literal["package", "theme"]] = Field(None, description="'package' or 'theme'; derived from metadata when omitted")
    metadata: Dict[str, Any] = Field(default_factory=dict)
    versions: List[VersionDescriptor] = Field(..., min_length=1)
    latest: Optional[str] = Field(None, description="Semver to mark latest; defaults to the highest")


class UserProfile(BaseModel):
    """User record as received from the VCS sign-in."""
    username: str
    node_id: str
    avatar: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
