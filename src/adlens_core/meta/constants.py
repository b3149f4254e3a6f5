"""Graph API constants and action/goal classification tables.

Table order matters: candidate lists are scanned first-match, so the
declared order decides which metric becomes the official result.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal, Mapping


GRAPH_BASE_URL = "https://graph.facebook.com"

PAGE_LIMIT = "200"
CREATIVE_BATCH_SIZE = 50

DEFAULT_ATTRIBUTION_WINDOWS = ("7d_click", "1d_click", "7d_view", "1d_view")

CAMPAIGN_FIELDS = "id,name,status,objective"

ADSET_INSIGHT_FIELDS = ",".join(
    [
        "campaign_id",
        "campaign_name",
        "adset_id",
        "adset_name",
        "optimization_goal",
        "spend",
        "impressions",
        "reach",
        "clicks",
        "actions",
        "cost_per_action_type",
    ]
)

AD_INSIGHT_FIELDS = ",".join(
    [
        "ad_id",
        "ad_name",
        "impressions",
        "clicks",
        "spend",
        "actions",
        "cost_per_action_type",
        "ctr",
    ]
)

AD_CREATIVE_FIELDS = "id,creative{id}"

CREATIVE_METADATA_FIELDS = (
    "id,name,thumbnail_url,"
    "object_story_spec{link_data{picture,image_hash,link},video_data{image_url,video_id}},"
    "asset_feed_spec{images{hash,url},videos{video_id,thumbnail_url}}"
)


LEAD_ACTION_TYPES = frozenset(
    {
        "lead",
        "leadgen",
        "leadgen.other",
        "leadgen_qualified_lead",
        "leadgen.qualified_lead",
        "omni_lead",
        "onsite_conversion.lead_grouped",
        "onsite_conversion.lead",
        "onsite_conversion.post_save",
        "offsite_conversion.fb_pixel_lead",
        "onsite_web_lead",
        "offsite_content_view_add_meta_leads",
        "submit_application",
        "submitted_application",
        "contact",
    }
)

ACTION_TYPE_LABELS: Mapping[str, str] = MappingProxyType(
    {
        "lead": "Leads",
        "leadgen": "Leads",
        "leadgen.other": "Leads",
        "leadgen_qualified_lead": "Leads qualificados",
        "leadgen.qualified_lead": "Leads qualificados",
        "omni_lead": "Leads Omni",
        "onsite_conversion.lead_grouped": "Leads",
        "onsite_conversion.lead": "Leads",
        "onsite_conversion.post_save": "Salvos",
        "offsite_conversion.fb_pixel_lead": "Leads (pixel)",
        "onsite_web_lead": "Leads (site)",
        "offsite_content_view_add_meta_leads": "Meta Leads",
        "submit_application": "Envios de cadastro",
        "submitted_application": "Cadastros enviados",
        "contact": "Contatos",
        "onsite_conversion.whatsapp_message": "Conversas no WhatsApp",
        "onsite_conversion.whatsapp_first_reply": "Respostas no WhatsApp",
        "onsite_conversion.whatsapp_inbox_reply": "Respostas no WhatsApp",
        "whatsapp_link_click": "Cliques para WhatsApp",
        "whatsapp_conversion": "Conversas no WhatsApp",
        "onsite_conversion.messaging_first_reply": "Conversas por mensagem",
        "onsite_conversion.messaging_conversation_started_7d": "Conversas iniciadas",
        "onsite_conversion.total_messaging_connection": "Conexões por mensagem",
        "messaging_conversation_started_7d": "Conversas iniciadas",
        "messaging_connection": "Conexões por mensagem",
        "onsite_conversion.messaging_total_conversation_starters": "Conversas por mensagem",
        "messages_sent": "Mensagens enviadas",
        "messaging_new_conversation": "Conversas iniciadas",
        "omni_opt_in": "Opt-ins",
        "omni_primary_message": "Mensagens principais",
        "purchase": "Compras",
        "offsite_conversion.fb_pixel_purchase": "Compras (pixel)",
        "initiate_checkout": "Inícios de checkout",
        "checkout_initiated": "Inícios de checkout",
        "add_to_cart": "Adições ao carrinho",
        "add_payment_info": "Informações de pagamento",
        "add_to_wishlist": "Adições à lista de desejos",
        "conversion": "Conversões",
        "website_conversion": "Conversões no site",
        "complete_registration": "Cadastros concluídos",
        "registration": "Cadastros",
        "start_trial": "Inícios de teste",
        "subscribe": "Assinaturas",
        "schedule": "Agendamentos",
        "link_click": "Cliques no link",
        "outbound_click": "Cliques de saída",
        "landing_page_view": "Visualizações da página de destino",
        "view_content": "Visualizações de conteúdo",
    }
)

DEFAULT_RESULT_LABEL = "Resultados"
CAMPAIGN_SUMMARY_LABEL = "Resultado"

# Upper-cased upstream spelling -> canonical optimization goal bucket.
OPTIMIZATION_GOAL_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "OFFSITE_CONVERSIONS": "PURCHASE",
        "CONVERSIONS": "PURCHASE",
        "PURCHASE_CONVERSIONS": "PURCHASE",
        "WEBSITE_CONVERSIONS": "PURCHASE",
        "VALUE": "PURCHASE",
        "OUTCOME_VALUE": "PURCHASE",
        "OUTCOME_PURCHASE": "PURCHASE",
        "PURCHASES": "PURCHASE",
        "PURCHASE": "PURCHASE",
        "OUTCOME_LEADS": "LEAD_GENERATION",
        "OUTCOME_LEAD_GENERATION": "LEAD_GENERATION",
        "LEADS": "LEAD_GENERATION",
        "LEAD": "LEAD_GENERATION",
        "LEAD_GENERATION": "LEAD_GENERATION",
        "OUTCOME_MESSAGES": "MESSAGES",
        "MESSAGING_APPOINTMENT_CONVERSION": "MESSAGES",
        "MESSAGING_PURCHASE_CONVERSION": "MESSAGES",
        "CONVERSATIONS": "MESSAGES",
        "WHATSAPP_MESSAGE": "MESSAGES",
        "REPLIES": "MESSAGES",
        "MESSAGES": "MESSAGES",
        "OUTCOME_SALES": "OUTCOME_SALES",
        "SALES": "OUTCOME_SALES",
        "OUTCOME_TRAFFIC": "LANDING_PAGE_VIEWS",
        "TRAFFIC": "LANDING_PAGE_VIEWS",
        "LANDING_PAGE_VIEWS": "LANDING_PAGE_VIEWS",
        "LINK_CLICKS": "LINK_CLICKS",
        "OUTCOME_ENGAGEMENT": "OUTCOME_ENGAGEMENT",
        "ENGAGEMENT": "OUTCOME_ENGAGEMENT",
        "POST_ENGAGEMENT": "POST_ENGAGEMENT",
        "IMPRESSIONS": "OUTCOME_REACH",
        "REACH": "OUTCOME_REACH",
        "BRAND_AWARENESS": "BRAND_AWARENESS",
        "OUTCOME_AWARENESS": "BRAND_AWARENESS",
        "AWARENESS": "BRAND_AWARENESS",
    }
)

OPTIMIZATION_GOAL_TO_ACTION_TYPES: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "LEAD_GENERATION": (
            "lead",
            "leadgen",
            "leadgen.other",
            "leadgen_qualified_lead",
            "leadgen.qualified_lead",
            "omni_lead",
            "onsite_conversion.lead_grouped",
            "onsite_conversion.lead",
            "onsite_conversion.post_save",
            "onsite_web_lead",
            "offsite_conversion.fb_pixel_lead",
            "offsite_content_view_add_meta_leads",
        ),
        "MESSAGES": (
            "onsite_conversion.messaging_first_reply",
            "onsite_conversion.messaging_conversation_started_7d",
            "messaging_conversation_started_7d",
            "onsite_conversion.messaging_total_conversation_starters",
            "onsite_conversion.total_messaging_connection",
            "onsite_conversion.messaging_first_reply_conversation",
            "onsite_conversion.whatsapp_first_reply",
            "whatsapp_conversion",
            "onsite_conversion.whatsapp_message",
        ),
        "PURCHASE": (
            "purchase",
            "offsite_conversion.fb_pixel_purchase",
            "conversion",
        ),
        "LANDING_PAGE_VIEWS": (
            "landing_page_view",
            "omni_landing_page_view",
            "view_content",
        ),
        "LINK_CLICKS": ("link_click", "outbound_click"),
        "POST_ENGAGEMENT": (
            "post_engagement",
            "page_engagement",
            "post_interaction_gross",
        ),
        "OUTCOME_ENGAGEMENT": (
            "post_engagement",
            "page_engagement",
            "post_interaction_gross",
        ),
        "OUTCOME_REACH": ("impressions", "reach"),
        "BRAND_AWARENESS": ("impressions", "reach"),
        "OUTCOME_SALES": (
            "purchase",
            "offsite_conversion.fb_pixel_purchase",
            "offsite_content_view_add_meta_leads",
            "view_content",
            "initiate_checkout",
            "checkout_initiated",
            "add_to_cart",
        ),
        "OUTCOME_TRAFFIC": (
            "landing_page_view",
            "omni_landing_page_view",
            "link_click",
            "outbound_click",
        ),
    }
)

# Always appended after the goal-specific candidates.
FALLBACK_RESULT_ACTION_TYPES: tuple[str, ...] = (
    "purchase",
    "offsite_conversion.fb_pixel_purchase",
    "value",
    "lead",
    "leadgen",
    "onsite_conversion.messaging_first_reply",
    "onsite_conversion.messaging_conversation_started_7d",
    "onsite_conversion.total_messaging_connection",
    "messaging_conversation_started_7d",
    "messaging_connection",
    "landing_page_view",
    "omni_landing_page_view",
    "link_click",
    "outbound_click",
    "post_engagement",
    "page_engagement",
    "view_content",
    "onsite_web_lead",
    "offsite_content_view_add_meta_leads",
)


@dataclass(frozen=True)
class ObjectiveResultRule:
    """How a campaign objective turns action volumes into one result."""

    label: str
    action_types: tuple[str, ...]
    mode: Literal["first", "sum"] = "sum"


LEAD_RESULT_ACTION_TYPES = (
    "lead",
    "leadgen",
    "leadgen.other",
    "onsite_conversion.lead",
    "onsite_web_lead",
    "offsite_conversion.fb_pixel_lead",
)

MESSAGE_RESULT_ACTION_TYPES = (
    "onsite_conversion.messaging_conversation_started_7d",
    "messaging_conversation_started_7d",
    "onsite_conversion.messaging_first_reply",
)

SALES_RESULT_ACTION_TYPES = ("purchase", "offsite_conversion.fb_pixel_purchase")

_LEADS_RULE = ObjectiveResultRule("Leads", LEAD_RESULT_ACTION_TYPES, "first")
_MESSAGES_RULE = ObjectiveResultRule("Conversas iniciadas", MESSAGE_RESULT_ACTION_TYPES, "first")
_SALES_RULE = ObjectiveResultRule("Vendas", SALES_RESULT_ACTION_TYPES, "first")

OBJECTIVE_RESULT_RULES: Mapping[str, ObjectiveResultRule] = MappingProxyType(
    {
        "OUTCOME_LEADS": _LEADS_RULE,
        "LEAD_GENERATION": _LEADS_RULE,
        "OUTCOME_ENGAGEMENT": _MESSAGES_RULE,
        "ENGAGEMENT": _MESSAGES_RULE,
        "MESSAGES": _MESSAGES_RULE,
        "OUTCOME_SALES": _SALES_RULE,
        "PURCHASE": _SALES_RULE,
    }
)

CAMPAIGN_OBJECTIVE_ALIASES: Mapping[str, str] = MappingProxyType(
    {
        "OUTCOME_LEAD_GENERATION": "OUTCOME_LEADS",
        "OUTCOME_LEADS": "OUTCOME_LEADS",
        "LEADS": "OUTCOME_LEADS",
        "LEAD": "OUTCOME_LEADS",
        "LEAD_GENERATION": "LEAD_GENERATION",
        "OUTCOME_ENGAGEMENT": "OUTCOME_ENGAGEMENT",
        "ENGAGEMENT": "ENGAGEMENT",
        "OUTCOME_MESSAGES": "MESSAGES",
        "MESSENGER": "MESSAGES",
        "MESSAGING": "MESSAGES",
        "MESSAGES": "MESSAGES",
        "OUTCOME_SALES": "OUTCOME_SALES",
        "SALES": "OUTCOME_SALES",
        "OUTCOME_PURCHASE": "OUTCOME_SALES",
        "PURCHASE": "PURCHASE",
    }
)
