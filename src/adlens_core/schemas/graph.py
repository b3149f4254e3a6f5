"""Pydantic models for Meta Graph API responses.

Every field is optional: insight rows are partial and an absent value means
"not reported". Numeric fields arrive as strings (sometimes as numbers) and
are parsed downstream.
"""
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


Numeric = Optional[Union[str, float]]


class ActionEntry(BaseModel):
    """One action count (or cost) for one action type.

    The Graph API may report the number directly in ``value`` or split it
    across attribution-window keys (``7d_click``, ``1d_view``, ``28d_value``).
    Those keys are kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    action_type: Optional[str] = None
    value: Numeric = None

    @property
    def attribution_windows(self) -> dict[str, object]:
        """Every field other than action_type/value, keyed by wire name."""
        return dict(self.model_extra or {})


class GraphCampaign(BaseModel):
    """Campaign node from /{account}/campaigns."""

    id: Optional[str] = None
    name: Optional[str] = None
    status: Optional[str] = None
    objective: Optional[str] = None


class InsightRow(BaseModel):
    """Fields shared by every insights level."""

    spend: Numeric = None
    impressions: Numeric = None
    clicks: Numeric = None
    actions: Optional[list[ActionEntry]] = None
    cost_per_action_type: Optional[list[ActionEntry]] = None


class AdsetInsightRow(InsightRow):
    """Row from /{account}/insights?level=adset."""

    campaign_id: Optional[str] = None
    campaign_name: Optional[str] = None
    adset_id: Optional[str] = None
    adset_name: Optional[str] = None
    optimization_goal: Optional[str] = None
    reach: Numeric = None


class AdInsightRow(InsightRow):
    """Row from /{campaign}/insights?level=ad."""

    ad_id: Optional[str] = None
    ad_name: Optional[str] = None
    ctr: Numeric = None


class CreativeRef(BaseModel):
    id: Optional[str] = None


class GraphAd(BaseModel):
    """Ad node from /{campaign}/ads with the creative id expanded."""

    id: Optional[str] = None
    creative: Optional[CreativeRef] = None


class LinkData(BaseModel):
    picture: Optional[str] = None
    image_hash: Optional[str] = None
    link: Optional[str] = None


class VideoData(BaseModel):
    image_url: Optional[str] = None
    video_id: Optional[str] = None


class ObjectStorySpec(BaseModel):
    link_data: Optional[LinkData] = None
    video_data: Optional[VideoData] = None


class AssetFeedImage(BaseModel):
    hash: Optional[str] = None
    url: Optional[str] = None


class AssetFeedVideo(BaseModel):
    video_id: Optional[str] = None
    thumbnail_url: Optional[str] = None


class AssetFeedSpec(BaseModel):
    images: Optional[list[AssetFeedImage]] = None
    videos: Optional[list[AssetFeedVideo]] = None


class GraphAdCreative(BaseModel):
    """Creative metadata from the batched ``?ids=`` lookup."""

    id: Optional[str] = None
    name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    object_story_spec: Optional[ObjectStorySpec] = None
    asset_feed_spec: Optional[AssetFeedSpec] = None
