from django import template
from django.utils.safestring import mark_safe

from project.media import build_media_url

from ..sanitize import sanitize_html
from ..utils import event_status, format_title, slugify_title, split_keywords, titleize

register = template.Library()


@register.filter
def sanitize(value):
    return mark_safe(sanitize_html(value))


@register.filter
def media_url(value):
    return build_media_url(value) or ""


@register.filter(name="honorific")
def honorific(value):
    return format_title(value)


@register.filter(name="titleize")
def titleize_filter(value):
    return titleize(value)


@register.filter
def keywords(value):
    return split_keywords(value)


@register.filter
def slug_or(value, fallback):
    """Title slug, falling back to e.g. the uuid when the title has no slug characters."""
    return slugify_title(value) or fallback


@register.filter
def status_label(event):
    return event_status(event)

