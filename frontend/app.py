"""City Explorer Tester - Streamlit Frontend."""

import json

import httpx
import streamlit as st

st.set_page_config(
    page_title="City Explorer",
    page_icon="🗺️",
    layout="wide",
)

# Initialize session state
if "location" not in st.session_state:
    st.session_state.location = None
if "results" not in st.session_state:
    st.session_state.results = {}
if "search_history" not in st.session_state:
    st.session_state.search_history = []


def fetch_location(url: str, query: str) -> dict:
    """Resolve a search query through GET /location."""
    try:
        with httpx.Client(timeout=30) as client:
            response = client.get(f"{url}/location", params={"data": query})
            response.raise_for_status()
            return {"success": True, "data": response.json()}
    except httpx.HTTPStatusError as e:
        return {"success": False, "error": f"{e.response.status_code}: {e.response.text}"}
    except httpx.HTTPError as e:
        return {"success": False, "error": str(e)}


def fetch_records(url: str, path: str, location: dict) -> dict:
    """Query one of the endpoints keyed by a resolved location."""
    try:
        with httpx.Client(timeout=30) as client:
            response = client.get(f"{url}{path}", params={"data": json.dumps(location)})
            response.raise_for_status()
            return {"success": True, "data": response.json()}
    except httpx.HTTPStatusError as e:
        return {"success": False, "error": f"{e.response.status_code}: {e.response.text}"}
    except httpx.HTTPError as e:
        return {"success": False, "error": str(e)}


def show_error_or(result: dict, empty_message: str) -> list:
    if not result.get("success"):
        st.error(result.get("error", "Request failed"))
        return []
    records = result.get("data") or []
    if not records:
        st.info(empty_message)
    return records


# Sidebar - Server
with st.sidebar:
    st.title("🗺️ City Explorer")
    st.divider()

    server_url = st.text_input(
        "Server URL",
        value="http://localhost:3000",
        placeholder="http://localhost:3000",
    ).rstrip("/")

    if st.session_state.location:
        st.divider()
        st.subheader("Location")
        location = st.session_state.location
        st.write(f"**Query:** {location.get('search_query', '-')}")
        st.write(f"**Address:** {location.get('formatted_query', '-')}")
        st.write(f"**Coordinates:** {location.get('latitude')}, {location.get('longitude')}")

        with st.expander("📄 Raw location"):
            st.json(location)

    if st.session_state.search_history:
        st.divider()
        st.subheader("Recent searches")
        for query in reversed(st.session_state.search_history[-5:]):
            st.caption(query)


# Main content
st.title("Explore a city")

with st.form("search"):
    query = st.text_input("Search for a location", placeholder="Seattle")
    submitted = st.form_submit_button("Explore!")

if submitted and query:
    with st.spinner("Looking up location..."):
        result = fetch_location(server_url, query)

    if result["success"]:
        st.session_state.location = result["data"]
        st.session_state.search_history.append(query)
        with st.spinner("Gathering weather, events and businesses..."):
            st.session_state.results = {
                "weather": fetch_records(server_url, "/weather", result["data"]),
                "meetups": fetch_records(server_url, "/meetups", result["data"]),
                "yelp": fetch_records(server_url, "/yelp", result["data"]),
            }
        st.rerun()
    else:
        st.session_state.location = None
        st.session_state.results = {}
        st.error(f"Could not find that location ({result['error']})")

if st.session_state.location:
    location = st.session_state.location
    st.header(location.get("formatted_query") or location.get("search_query"))
    st.map([{"lat": location["latitude"], "lon": location["longitude"]}])

    results = st.session_state.results
    tab_weather, tab_meetups, tab_yelp = st.tabs([
        "🌦️ Weather",
        "👥 Meetups",
        "🍽️ Yelp",
    ])

    with tab_weather:
        for day in show_error_or(results.get("weather", {}), "No forecast available."):
            st.markdown(f"**{day.get('time', '')}** - {day.get('forecast', '')}")

    with tab_meetups:
        for event in show_error_or(results.get("meetups", {}), "No upcoming meetups."):
            st.markdown(f"[{event.get('name', 'Event')}]({event.get('link', '')})")
            st.caption(f"Hosted by {event.get('host', '-')}, created {event.get('creation_date', '-')}")

    with tab_yelp:
        for business in show_error_or(results.get("yelp", {}), "No businesses found."):
            col1, col2 = st.columns([1, 3])
            with col1:
                if business.get("image_url"):
                    st.image(business["image_url"], use_container_width=True)
            with col2:
                st.markdown(f"### [{business.get('name', '-')}]({business.get('url', '')})")
                st.write(f"Price: {business.get('price') or '-'}  ·  Rating: {business.get('rating') or '-'}")
else:
    st.info("Search for a location to see its weather, meetups and restaurants.")
