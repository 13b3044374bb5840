import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dataclasses import replace
from datetime import datetime, time, timedelta
from uuid import uuid4

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from daybook.aggregates import (
    average,
    compare_periods,
    daily_breakdown,
    delta,
    distribution,
    growth_leaders,
    longest_streak,
    summary,
    weighted_score,
)
from daybook.config import configure_logging, load_settings
from daybook.domain import Record
from daybook.errors import CategoryInUseError, RecordValidationError
from daybook.events import PERSIST_FAILED, EventBus, register_default_handlers
from daybook.filters import by_archived, by_category, by_date_range, by_favorite, by_text_match, sort_by
from daybook.lazy import lazy_top_categories
from daybook.memo import daily_counts
from daybook.profiles import PROFILES, get_profile, style_for
from daybook.services import default_statistics_service
from daybook.storage import FilePersistence
from daybook.store import RecordStore
from daybook.transforms import load_seed

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title="Daybook", layout="wide")

profile_name = st.sidebar.selectbox(
    "Journal",
    options=list(PROFILES),
    index=list(PROFILES).index(settings.profile) if settings.profile in PROFILES else 0,
    format_func=lambda name: PROFILES[name].title,
)
profile = get_profile(profile_name)

store_key = f"store_{profile.name}"
if store_key not in st.session_state:
    bus = register_default_handlers(EventBus())
    st.session_state.setdefault("save_alerts", [])
    bus.subscribe(PERSIST_FAILED, lambda event, payload: st.session_state.save_alerts.append(payload) or {})
    st.session_state[store_key] = RecordStore(
        FilePersistence(settings.data_dir),
        key=profile.name,
        bus=bus,
        categories=profile.categories,
    ).load()

store: RecordStore = st.session_state[store_key]
records = store.all()
categories = store.categories()
cat_names = {c.id: c.name for c in categories}

if not store.last_save_ok:
    st.sidebar.warning("Last change could not be saved to disk. It is kept for this session.")


def records_to_df(rs):
    rows = []
    for r in rs:
        icon, color = style_for(categories, r.cat_id)
        row = {
            "date": pd.Timestamp(r.date.astimezone().replace(tzinfo=None)),
            "category": f"{icon} {cat_names.get(r.cat_id, r.cat_id)}",
            "title": r.title,
            "note": r.note,
            "tags": ", ".join(r.tags),
            "subject": r.subject_id or "",
            "favorite": "⭐" if r.favorite else "",
            "id": r.id,
        }
        for field in profile.measurements:
            value = r.value(field)
            row[field] = value if value is not None else np.nan
        rows.append(row)
    return pd.DataFrame(rows)


def parse_measurements(raw_values):
    """(field, float) pairs from form text; blank fields are skipped."""
    parsed = []
    bad = None
    for field, raw in raw_values.items():
        if not raw.strip():
            continue
        try:
            parsed.append((field, float(raw)))
        except ValueError:
            bad = field
    return tuple(parsed), bad


menu = st.sidebar.radio(
    "Menu",
    ["🏠 Overview", "📝 Entries", "➕ Add entry", "🗂 Categories", "📊 Statistics"]
)

if menu == "🏠 Overview":
    st.title(f"🏠 {profile.title}")
    s = summary(records)
    k1, k2, k3, k4 = st.columns(4)
    with k1:
        st.metric("Entries", s.total)
    with k2:
        st.metric("Last 7 days", s.last_7_days)
    with k3:
        st.metric("Last 30 days", s.last_30_days)
    with k4:
        st.metric("Per active day (30d)", f"{s.frequency_30_days:.1f}")

    week = compare_periods(records, 7)
    if week.change is not None:
        st.caption(f"{week.current} entries this week vs {week.previous} the week before ({week.change:+.0%})")

    if not records and profile.name == "mood":
        seed_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "data", "seed.json")
        if os.path.exists(seed_path) and st.button("Load demo entries"):
            _, seed_records = load_seed(seed_path)
            for r in seed_records:
                store.add(r)
            st.rerun()

    counts = daily_counts(records, settings.tz_name)
    if counts:
        fig_days = px.bar(
            x=[day.isoformat() for day, _ in counts],
            y=[n for _, n in counts],
            labels={"x": "Day", "y": "Entries"},
            title="Entries per day",
            template="plotly_dark",
        )
        st.plotly_chart(fig_days, use_container_width=True)

        top = list(lazy_top_categories(records, categories, k=3))
        st.subheader("Most frequent")
        for name, total in top:
            st.markdown(f"- **{name}**: {total}")
    else:
        st.info("No entries yet.")

elif menu == "📝 Entries":
    st.title("📝 Entries")

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        query = st.text_input("Search", value="")
    with col2:
        selected_cat = st.selectbox("Category", options=["all"] + [c.id for c in categories],
                                    format_func=lambda cid: "All" if cid == "all" else cat_names.get(cid, cid))
    with col3:
        sort_key = st.selectbox("Sort by", options=["date", "title", "category", *profile.measurements])
    with col4:
        direction = st.radio("Order", options=["desc", "asc"], horizontal=True)

    f1, f2 = st.columns(2)
    with f1:
        show_archived = st.checkbox("Show archived", value=False)
    with f2:
        only_favorites = st.checkbox("⭐ Favorites only", value=False)
    date_range = st.date_input("Date range", value=(), key="entries_date_range")

    view = by_archived(records, show_archived)
    if only_favorites:
        view = by_favorite(view)
    if selected_cat != "all":
        view = by_category(view, selected_cat)
    if len(date_range) == 2:
        start = datetime.combine(date_range[0], time.min).astimezone()
        end = datetime.combine(date_range[1] + timedelta(days=1), time.min).astimezone()
        view = by_date_range(view, start, end)
    view = by_text_match(view, query)
    view = sort_by(view, sort_key, direction)

    if view:
        df = records_to_df(view)
        disp = df.assign(date=df["date"].dt.strftime("%Y-%m-%d %H:%M"))
        st.dataframe(disp.drop(columns=["id"]), use_container_width=True)
        st.download_button("⬇ Download CSV", df.to_csv(index=False), file_name=f"{profile.name}.csv", mime="text/csv")

        chosen = st.selectbox("Entry", options=[r.id for r in view],
                              format_func=lambda rid: next(r.title or r.id for r in view if r.id == rid))
        current = store.get(chosen).get_or_else(None)
        a1, a2, a3 = st.columns(3)
        with a1:
            if st.button("Unfavorite" if current.favorite else "⭐ Favorite"):
                (store.unfavorite if current.favorite else store.favorite)(chosen)
                st.rerun()
        with a2:
            if st.button("Unarchive" if show_archived else "Archive"):
                (store.unarchive if show_archived else store.archive)(chosen)
                st.rerun()
        with a3:
            if st.button("Delete"):
                store.delete(chosen)
                st.rerun()

        with st.expander("✏️ Edit entry"):
            with st.form(f"edit_{chosen}"):
                cat_ids = [c.id for c in categories]
                e_cat = st.selectbox("Category", options=cat_ids,
                                     index=cat_ids.index(current.cat_id) if current.cat_id in cat_ids else 0,
                                     format_func=lambda cid: cat_names.get(cid, cid))
                e_title = st.text_input("Title", value=current.title)
                e_note = st.text_area("Note", value=current.note)
                local = current.date.astimezone()
                e_day = st.date_input("Date", value=local.date())
                e_at = st.time_input("Time", value=local.time().replace(second=0, microsecond=0))
                e_tags = st.multiselect("Tags", options=sorted(set(profile.tags) | set(current.tags)),
                                        default=list(current.tags))
                e_subject = st.text_input("Subject", value=current.subject_id or "") if profile.measurements else ""
                e_raw = {}
                for field in profile.measurements:
                    value = current.value(field)
                    e_raw[field] = st.text_input(field.capitalize(), value="" if value is None else f"{value:g}")
                saved = st.form_submit_button("Save changes")

            if saved:
                parsed, bad = parse_measurements(e_raw)
                if bad:
                    st.error(f"{bad.capitalize()} must be a number")
                else:
                    try:
                        store.update(replace(
                            current,
                            cat_id=e_cat,
                            title=e_title.strip(),
                            note=e_note.strip(),
                            date=datetime.combine(e_day, e_at).astimezone(),
                            tags=tuple(e_tags),
                            subject_id=e_subject.strip() or None,
                            values=tuple((k, v) for k, v in current.values if k not in profile.measurements) + parsed,
                        ))
                        st.rerun()
                    except RecordValidationError as e:
                        st.error(str(e))
    else:
        st.info("No entries match the selected filters")

elif menu == "➕ Add entry":
    st.title("➕ Add entry")
    with st.form("add_entry", clear_on_submit=True):
        cat_id = st.selectbox("Category", options=[c.id for c in categories],
                              format_func=lambda cid: f"{style_for(categories, cid)[0]} {cat_names.get(cid, cid)}")
        title = st.text_input("Title")
        note = st.text_area("Note")
        day = st.date_input("Date", value=datetime.now().date())
        at = st.time_input("Time", value=datetime.now().time().replace(second=0, microsecond=0))
        tags = st.multiselect("Tags", options=list(profile.tags))
        subject = st.text_input("Subject (e.g. plant name)") if profile.measurements else ""
        values = {}
        for field in profile.measurements:
            raw = st.text_input(field.capitalize(), value="")
            values[field] = raw
        submitted = st.form_submit_button("Save")

    if submitted:
        parsed, bad = parse_measurements(values)
        if bad:
            st.error(f"{bad.capitalize()} must be a number")
        else:
            record = Record(
                id=uuid4().hex,
                date=datetime.combine(day, at).astimezone(),
                cat_id=cat_id,
                title=title.strip(),
                note=note.strip(),
                values=tuple(parsed),
                tags=tuple(tags),
                subject_id=subject.strip() or None,
            )
            try:
                store.add(record)
                st.success("Saved")
            except RecordValidationError as e:
                st.error(str(e))

elif menu == "🗂 Categories":
    st.title("🗂 Categories")
    usage = {s.cat_id: s.count for s in distribution(records, categories)}
    for c in categories:
        icon, color = style_for(categories, c.id)
        st.markdown(f"{icon} <span style='color:{color}'>**{c.name}**</span> · {usage.get(c.id, 0)} entries",
                    unsafe_allow_html=True)

    doomed = st.selectbox("Remove category", options=[c.id for c in categories],
                          format_func=lambda cid: cat_names.get(cid, cid))
    if st.button("Remove"):
        try:
            store.delete_category(doomed)
            st.rerun()
        except CategoryInUseError as e:
            st.error(str(e))

elif menu == "📊 Statistics":
    st.title("📊 Statistics")
    window = st.radio("Period", options=[7, 30, 90], format_func=lambda d: f"{d} days", horizontal=True)

    report = default_statistics_service().window_report(window, records, categories)
    for v in report["validation"]:
        for msg in v["messages"]:
            st.warning(msg)
    result = report["result"]

    k1, k2, k3 = st.columns(3)
    with k1:
        st.metric("Entries", result["entries"])
    with k2:
        st.metric("Per active day", f"{result['frequency']:.1f}")
    with k3:
        st.metric("Longest streak", f"{longest_streak(records, settings.tz)} days")

    shares = [row for row in result["distribution"] if row["count"]]
    if shares:
        df_share = pd.DataFrame(shares).assign(category=lambda d: d["cat_id"].map(lambda cid: cat_names.get(cid, cid)))
        fig_pie = px.pie(
            df_share,
            values="count",
            names="category",
            color="category",
            color_discrete_map={cat_names.get(c.id, c.id): style_for(categories, c.id)[1] for c in categories},
            title="Distribution",
        )
        fig_pie.update_layout(height=320)
        st.plotly_chart(fig_pie, use_container_width=True)

    score = weighted_score(records, categories)
    if score is not None:
        st.metric("Average mood score", f"{score:.2f}")

    for field in profile.measurements:
        st.subheader(field.capitalize())
        avg = average(records, field, window)
        change = delta(records, field, window)
        c1, c2 = st.columns(2)
        with c1:
            st.metric("Average", "-" if avg is None else f"{avg:.1f}")
        with c2:
            # no change and not enough data are shown differently
            st.metric("Change", "not enough data" if change is None else f"{change:+.1f}")

        df = records_to_df(sort_by(records, "date"))
        if not df.empty and df[field].notna().any():
            fig_line = go.Figure()
            for subject, part in df[df[field].notna()].groupby("subject"):
                fig_line.add_trace(go.Scatter(x=part["date"], y=part[field], mode="lines+markers", name=subject or "-"))
            fig_line.update_layout(template="plotly_dark", margin=dict(t=30, b=10, l=10, r=10))
            st.plotly_chart(fig_line, use_container_width=True)

        leaders = growth_leaders(records, field, window, limit=5)
        if leaders:
            st.table(pd.DataFrame([{"subject": g.subject_id, "growth": g.growth, "entries": g.entries} for g in leaders]))

    tags = result["tags"]
    if tags:
        st.subheader("Tags")
        st.bar_chart(pd.Series(tags).sort_values(ascending=False))

    breakdown = daily_breakdown(records, profile.measurements[0] if profile.measurements else None, settings.tz)
    if breakdown:
        st.subheader("Daily breakdown")
        st.table(pd.DataFrame([
            {
                "day": b.day.isoformat(),
                "entries": b.count,
                "change": "-" if b.delta is None else f"{b.delta:+.1f}",
                "tags": ", ".join(b.tags) or "-",
            }
            for b in breakdown[:14]
        ]))

if st.session_state.get("save_alerts"):
    st.sidebar.caption(f"{len(st.session_state.save_alerts)} unsaved change(s) this session")
