import asyncio
import streamlit as st
import pandas as pd

from app.core.session_store import load_session
from app.models.booking import Role, Scope
from app.services.booking_filters import status_date
from app.services.booking_service import BookingService
from app.services.status import action_label, allowed_targets

# Page Config
st.set_page_config(
    page_title="Bookings",
    page_icon="💍",
    layout="wide"
)

st.title("Wedding Planner - Bookings")

session = load_session()
if session is None or not session.user_id:
    st.error("You are not signed in. Log in again to see your bookings.")
    st.stop()

if session.role not in (Role.VENDOR, Role.CUSTOMER):
    st.info("Bookings are shown to vendors and customers only.")
    st.stop()

scope = Scope(role=session.role, actor_id=session.user_id)

# The service lives across reruns so a failed refresh keeps the last list
if "booking_service" not in st.session_state or st.session_state.booking_service.scope != scope:
    st.session_state.booking_service = BookingService(scope, session)
    asyncio.run(st.session_state.booking_service.list_bookings())

service: BookingService = st.session_state.booking_service

if st.button("Refresh"):
    asyncio.run(service.list_bookings())

for notice in service.pop_notices():
    if notice.level == "success":
        st.success(notice.message)
    elif notice.level == "error":
        st.error(notice.message)
    else:
        st.info(notice.message)

# Metrics
stats = service.stats
cols = st.columns(5)
cols[0].metric("Total", stats.total)
cols[1].metric("Pending", stats.pending)
cols[2].metric("Confirmed", stats.confirmed)
cols[3].metric("Completed", stats.completed)
cols[4].metric("Cancelled", stats.cancelled)

# Filters
f1, f2 = st.columns([1, 3])
status_filter = f1.selectbox("Status", ["all", "interested", "pending", "confirmed", "completed", "cancelled"])
search = f2.text_input("Search customer, service or category")

shown = service.filtered(status_filter, search)

if not shown:
    st.info("No bookings match.")
    st.stop()

df = pd.DataFrame([
    {
        "ID": b.id,
        "Service": b.service_name,
        "Category": b.category,
        "Customer": b.customer_name or "-",
        "Provider": b.provider_name,
        "Status": b.status.value.title(),
        "Date": status_date(b).label,
        "At": status_date(b).at,
    }
    for b in shown
])
st.dataframe(
    df,
    use_container_width=True,
    column_config={
        "At": st.column_config.DatetimeColumn("When", format="D.M.YYYY HH:mm"),
    }
)

st.subheader("Actions")
for booking in shown:
    targets = allowed_targets(booking.status, scope.role)
    if not targets and scope.role != Role.CUSTOMER:
        continue

    row = st.columns([3] + [1] * (len(targets) + 1))
    row[0].write(f"**{booking.service_name}** · {booking.customer_name or booking.provider_name} · {booking.status.value.title()}")
    for i, target in enumerate(targets, start=1):
        if row[i].button(action_label(scope.role, booking.status, target), key=f"{booking.id}-{target.value}"):
            asyncio.run(service.transition_status(booking.id, target))
            st.rerun()

    if scope.role == Role.CUSTOMER:
        confirm = row[-1].checkbox("Sure?", key=f"{booking.id}-confirm")
        if row[-1].button("Remove", key=f"{booking.id}-remove", disabled=not confirm):
            asyncio.run(service.delete_booking(booking.id, confirmed=True))
            st.rerun()

# Footer
st.markdown("---")
st.caption(f"Signed in as {scope.role.value} {scope.actor_id}")
