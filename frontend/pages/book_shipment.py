# frontend/pages/book_shipment.py
import os
import requests
import pandas as pd
import streamlit as st
from dotenv import load_dotenv

load_dotenv()
st.set_page_config(page_title="Book Device Shipment", layout="wide")

ALERT_SOUND_URL = os.getenv(
    "ALERT_SOUND_URL", "https://assets.mixkit.co/active_storage/sfx/2955/2955-preview.mp3"
)

# ---------- Helpers ----------
def get_api_base_and_token():
    api_base = st.session_state.get("api_base") or os.getenv("API_BASE", "http://127.0.0.1:8011")
    token = st.session_state.get("jwt", "")
    hdrs = {"Authorization": f"Bearer {token}"} if token else {}
    return api_base.rstrip("/"), token, hdrs

def _error_text(resp) -> str:
    try:
        body = resp.json()
        return body.get("error") or body.get("detail") or resp.text[:180]
    except ValueError:
        return resp.text[:180]

def call(method: str, url: str, hdrs: dict, payload: dict | None = None):
    r = requests.request(method, url, headers=hdrs, json=payload, timeout=20)
    if r.status_code >= 400:
        raise RuntimeError(_error_text(r))
    return r.json() if r.content else None

@st.cache_resource
def error_beep() -> bytes | None:
    """Downloaded once per server process and reused by every session."""
    try:
        r = requests.get(ALERT_SOUND_URL, timeout=10)
        r.raise_for_status()
        return r.content
    except requests.RequestException:
        return None

def beep():
    sound = error_beep()
    if sound:
        st.audio(sound, format="audio/mp3", autoplay=True)

API_BASE, TOKEN, HDRS = get_api_base_and_token()
BOOKINGS = f"{API_BASE}/shipments/bookings"

st.title("📦 Book Device Shipment")
with st.sidebar:
    st.info(f"API: {API_BASE}")
    st.write("JWT:", "✅ present" if TOKEN else "❌ missing")

# ---------- Booking ----------
booking = st.session_state.get("booking")

if booking is None:
    c1, c2, c3, c4 = st.columns([1,1,1,1])
    kind = c1.radio("Device type", ["cellular", "serial"], format_func=lambda k: "IMEI" if k == "cellular" else "Serial")
    qc = c2.checkbox("Requires QC", value=True)
    repair = c3.checkbox("Requires Repair", value=False)
    if c4.button("Start booking"):
        try:
            st.session_state["booking"] = call("POST", BOOKINGS, HDRS, {
                "device_kind": kind, "requires_qc": qc, "requires_repair": repair,
            })
            st.rerun()
        except (requests.RequestException, RuntimeError) as e:
            st.error(f"Could not open booking: {e}")
    st.stop()

URL = f"{BOOKINGS}/{booking['id']}"

def refresh():
    st.session_state["booking"] = call("GET", URL, HDRS)

# ---------- Purchase order ----------
try:
    pos = call("GET", f"{API_BASE}/purchase-orders?status=pending", HDRS) or []
except (requests.RequestException, RuntimeError) as e:
    pos = []
    st.error(f"Purchase orders unavailable: {e}")

labels = {po["id"]: f"{po['po_number']} - {po.get('supplier_name') or ''}" for po in pos}
options = [None] + list(labels)
current = booking.get("purchase_order_id")
po_id = st.selectbox(
    "Purchase Order", options,
    index=options.index(current) if current in options else 0,
    format_func=lambda i: "Select Purchase Order" if i is None else labels[i],
)
if po_id != current and po_id is not None:
    try:
        call("PATCH", URL, HDRS, {"purchase_order_id": po_id})
        refresh()
    except (requests.RequestException, RuntimeError) as e:
        st.error(f"Could not select purchase order: {e}")

# ---------- Batch settings ----------
st.subheader("Batch Settings")
b1, b2 = st.columns(2)
batch_qc = b1.checkbox("Requires QC", value=booking["requires_qc"], key="batch_qc")
batch_repair = b2.checkbox("Requires Repair", value=booking["requires_repair"], key="batch_repair")
if (batch_qc, batch_repair) != (booking["requires_qc"], booking["requires_repair"]):
    try:
        call("PATCH", URL, HDRS, {"requires_qc": batch_qc, "requires_repair": batch_repair})
        refresh()
    except (requests.RequestException, RuntimeError) as e:
        st.error(f"Batch settings not saved: {e}")

# ---------- Scanner ----------
label = "Scan IMEI" if booking["device_kind"] == "cellular" else "Scan Serial Number"
with st.form("scan", clear_on_submit=True):
    s1, s2 = st.columns([4,1])
    ident = s1.text_input(label, key="scan_input")
    s2.write(f"Next Tray: **{booking['next_tray']}**")
    scanned = st.form_submit_button("Add")

if scanned and ident:
    try:
        dev = call("POST", f"{URL}/scan", HDRS, {"identifier": ident})
        if dev.get("alert"):
            beep()
        refresh()
    except RuntimeError as e:
        beep()
        st.error(str(e))
    except requests.RequestException as e:
        st.error(f"Network error: {e}")

booking = st.session_state["booking"]

# ---------- Scanned devices by tray ----------
st.subheader(f"Scanned Devices ({booking['device_count']})")
if not booking["devices"]:
    st.info("No devices scanned yet")

for tray in booking["trays"]:
    st.markdown(f"**{tray['code']}** ({tray['count']} devices), {tray['count']}/{tray['capacity']}")
    devices = [d for d in booking["devices"] if d["location"] == tray["code"]]
    df = pd.DataFrame(devices, columns=["identifier", "manufacturer", "model", "color", "storage", "grade", "status", "error"])
    st.dataframe(df, use_container_width=True, hide_index=True)

# ---------- Edit / remove ----------
if booking["devices"]:
    st.subheader("Edit device")
    ids = [d["identifier"] for d in booking["devices"]]
    sel = st.selectbox("Device", ids, key="edit_sel")
    dev = next(d for d in booking["devices"] if d["identifier"] == sel)

    colors: list[str] = []
    if dev["manufacturer"] and dev["model"]:
        try:
            colors = call("GET", f"{API_BASE}/catalog/configurations/colors?manufacturer="
                          f"{requests.utils.quote(dev['manufacturer'])}&model={requests.utils.quote(dev['model'])}",
                          HDRS) or []
        except (requests.RequestException, RuntimeError):
            colors = []

    e1, e2, e3, e4, e5 = st.columns(5)
    manufacturer = e1.text_input("Manufacturer", value=dev["manufacturer"])
    model = e2.text_input("Model", value=dev["model"])
    color = (e3.selectbox("Color", [""] + colors, index=([""] + colors).index(dev["color"]) if dev["color"] in colors else 0)
             if colors else e3.text_input("Color", value=dev["color"], placeholder="e.g., Black"))
    storage = e4.text_input("Storage (GB)", value=dev["storage"]) if booking["device_kind"] == "cellular" else ""
    grade = e5.selectbox("Grade", [None, 1, 2, 3, 4, 5, 6], index=[None, 1, 2, 3, 4, 5, 6].index(dev["grade"]),
                         format_func=lambda g: "Select Grade" if g is None else f"Grade {'ABCDEF'[g - 1]}")
    f1, f2, f3, f4 = st.columns(4)
    dev_qc = f1.checkbox("QC", value=dev["requires_qc"], key=f"qc_{sel}")
    dev_repair = f2.checkbox("Repair", value=dev["requires_repair"], key=f"rep_{sel}")

    if f3.button("Save"):
        payload = {"manufacturer": manufacturer, "model": model, "color": color,
                   "grade": grade, "requires_qc": dev_qc, "requires_repair": dev_repair}
        if booking["device_kind"] == "cellular":
            payload["storage"] = storage
        try:
            res = call("PATCH", f"{URL}/devices/{requests.utils.quote(sel, safe='')}", HDRS, payload)
            if res.get("alert"):
                beep()
                st.error(res.get("error"))
            refresh()
        except RuntimeError as e:
            st.error(str(e))
    if f4.button("Remove"):
        try:
            st.session_state["booking"] = call("DELETE", f"{URL}/devices/{requests.utils.quote(sel, safe='')}", HDRS)
            st.rerun()
        except RuntimeError as e:
            st.error(str(e))

st.markdown("---")

# ---------- Footer ----------
c_cancel, c_submit = st.columns([1,1])
if c_cancel.button("Cancel"):
    try:
        call("DELETE", URL, HDRS)
    except (requests.RequestException, RuntimeError) as e:
        st.warning(f"Booking was not discarded on the server: {e}")
    st.session_state.pop("booking", None)
    st.rerun()

if c_submit.button("Book Shipment", type="primary",
                   disabled=not booking["devices"] or not booking.get("purchase_order_id")):
    with st.spinner("Booking..."):
        try:
            res = call("POST", f"{URL}/submit", HDRS)
            st.session_state.pop("booking", None)
            st.success(f"Shipment booked: {res['created']} device(s) on PO {res['purchase_order_id']}")
        except RuntimeError as e:
            st.error(str(e))
