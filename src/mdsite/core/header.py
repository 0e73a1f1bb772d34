"""HTML <head> synthesis from a flat front-matter field map.

build_header is a pure function: every call starts from an empty tag list, so no
state leaks from one document into the next.
"""

from typing import Any, Optional

from markupsafe import Markup, escape
from pydantic import BaseModel, Field

from mdsite.core.utils.dates import parse_date
from mdsite.core.utils.urls import make_absolute


SCALAR_KEYS = ('charset', 'viewport', 'title', 'description', 'image', 'canonical')
MAP_KEYS = ('og', 'twitter', 'meta')


class HeaderTag(BaseModel):
    """A single head element, e.g. HeaderTag(name='link', attrs={'rel': 'preload', ...})."""
    name: str
    attrs: dict[str, str] = Field(default_factory=dict)
    text: Optional[str] = None

    def render(self) -> str:
        attrs = ''.join(f' {k}="{escape(v)}"' for k, v in self.attrs.items())
        if self.text is not None:
            return f"<{self.name}{attrs}>{escape(self.text)}</{self.name}>"
        return f"<{self.name}{attrs}>"


def _meta(content: Any, name: str = None, prop: str = None) -> HeaderTag:
    attrs = {'name': name} if name else {'property': prop}
    attrs['content'] = str(content)
    return HeaderTag(name='meta', attrs=attrs)


def _link(rel: str, href: str, **extra: str) -> HeaderTag:
    return HeaderTag(name='link', attrs={'rel': rel, **extra, 'href': href})


def absolutize_images(fields: dict[str, Any], base_url: str) -> dict[str, Any]:
    """Return a copy with image, og.image and twitter.image made absolute for social sharing."""
    out = dict(fields)
    if isinstance(out.get('image'), str):
        out['image'] = make_absolute(out['image'], base_url)
    for key in ('og', 'twitter'):
        if isinstance(out.get(key), dict) and isinstance(out[key].get('image'), str):
            out[key] = {**out[key], 'image': make_absolute(out[key]['image'], base_url)}
    return out


def keywords_for(fields: dict[str, Any]) -> Optional[str]:
    """Explicit keywords (list or string), else tags + categories, else None."""
    if 'keywords' in fields:
        kw = fields['keywords']
        return ', '.join(str(k) for k in kw) if isinstance(kw, list) else str(kw)
    terms = []
    for key in ('tags', 'categories'):
        if isinstance(fields.get(key), list):
            terms.extend(str(t) for t in fields[key])
    return ', '.join(terms) if terms else None


def _basic_tags(fields: dict[str, Any]) -> list[HeaderTag]:
    tags = []
    scalars = {k: fields[k] for k in SCALAR_KEYS if isinstance(fields.get(k), str)}
    if 'charset' in scalars:
        tags.append(HeaderTag(name='meta', attrs={'charset': scalars['charset']}))
    if 'viewport' in scalars:
        tags.append(_meta(scalars['viewport'], name='viewport'))
    if 'title' in scalars:
        tags.append(HeaderTag(name='title', text=scalars['title']))
        tags.append(_meta(scalars['title'], prop='og:title'))
        tags.append(_meta(scalars['title'], name='twitter:title'))
    if 'description' in scalars:
        tags.append(_meta(scalars['description'], name='description'))
        tags.append(_meta(scalars['description'], prop='og:description'))
    if 'image' in scalars:
        tags.append(_meta(scalars['image'], prop='og:image'))
        tags.append(_meta(scalars['image'], name='twitter:image'))
    if 'canonical' in scalars:
        tags.append(_link('canonical', scalars['canonical']))

    for key in MAP_KEYS:
        values = fields.get(key)
        if not isinstance(values, dict):
            continue
        for name, content in values.items():
            if isinstance(content, (dict, list)) or content is None:
                continue
            if key == 'og':
                tags.append(_meta(content, prop=f"og:{name}"))
            elif key == 'twitter':
                tags.append(_meta(content, name=f"twitter:{name}"))
            else:
                tags.append(_meta(content, name=name))
    return tags


def _fill_in(fields: dict[str, Any], base_url: str, hreflang_default: Optional[str]) -> list[HeaderTag]:
    """Derived tags: keywords, article dates, og/twitter url and hreflang alternates."""
    tags = []
    keywords = keywords_for(fields)
    if keywords:
        tags.append(_meta(keywords, name='keywords'))

    published = parse_date(fields.get('published'))
    if published:
        tags.append(_meta(published.isoformat(), prop='article:published_time'))

    canonical = fields.get('canonical')
    if isinstance(canonical, str):
        url = make_absolute(canonical, base_url)
        tags.append(_meta(url, prop='og:url'))
        tags.append(_meta(url, name='twitter:url'))

    modified = parse_date(fields.get('modified'))
    if modified:
        tags.append(_meta(modified.isoformat(), prop='article:modified_time'))
        tags.append(_meta(modified.isoformat(), prop='og:updated_time'))

    hreflang = fields.get('hreflang')
    if isinstance(hreflang, dict):
        alternates: dict[str, str] = {}
        for lang, uri in hreflang.items():
            alternates[str(lang)] = make_absolute(str(uri), base_url)
            tags.append(_link('alternate', alternates[str(lang)], hreflang=str(lang)))
        locale = fields.get('locale')
        if isinstance(locale, str) and isinstance(canonical, str):
            alternates[locale] = make_absolute(canonical, base_url)
            tags.append(_link('alternate', alternates[locale], hreflang=locale))
        if hreflang_default and hreflang_default in alternates:
            tags.append(_link('alternate', alternates[hreflang_default], hreflang='x-default'))
    return tags


def build_header(fields: dict[str, Any], base_url: str, hreflang_default: Optional[str] = None) -> Markup:
    """Render the <head> fragment for a field map."""
    fields = absolutize_images(fields, base_url)
    tags = _basic_tags(fields) + _fill_in(fields, base_url, hreflang_default)
    tags.extend(v for v in fields.values() if isinstance(v, HeaderTag))
    return Markup('\n'.join(t.render() for t in tags))
