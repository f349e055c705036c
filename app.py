import streamlit as st
from datetime import date

from config import (
    EYE_COLORS,
    HAIR_TEXTURES,
    INDUSTRY_WORK_TYPES,
    MAINTENANCE_OPTIONS,
    MAX_INSPIRATION_UPLOADS,
    NATURAL_HAIR_COLORS,
    OCCASIONS,
    SELECTED_HAIR_COLORS,
    SKIN_TONES,
    TREATMENTS,
    WORK_TYPES,
    HairLength,
    PersonalStyle,
)
from images import materialize
from logger import load_logs
from orchestrator import run_submission
from recommendations import report_images, resolve
from report_content import format_long_date, normalize_dates
from schemas import ConsultationForm

# --- 🔗 IMPORT CLIENT SETTINGS ---
import client_settings as cs

st.set_page_config(page_title=cs.APP_TITLE, page_icon=cs.PAGE_ICON)

TOTAL_SLIDES = 12
DONE = TOTAL_SLIDES + 1

# --- STATE INITIALIZATION ---
if "form_data" not in st.session_state: st.session_state.form_data = {}
if "dates" not in st.session_state: st.session_state.dates = []
if "uploads" not in st.session_state: st.session_state.uploads = []
if "idx" not in st.session_state: st.session_state.idx = 1
if "last_report" not in st.session_state: st.session_state.last_report = None

data = st.session_state.form_data


def go(step):
    st.session_state.idx = step
    st.rerun()


def nav(can_continue=True, warning="Please choose an option to continue."):
    c1, _, c3 = st.columns([1, 4, 1])
    if st.session_state.idx > 1 and c1.button("⬅️ Back"):
        go(st.session_state.idx - 1)
    if c3.button("Next ➡️"):
        if can_continue:
            go(st.session_state.idx + 1)
        else:
            st.warning(warning)


def choice(label, options, field):
    current = data.get(field)
    index = options.index(current) if current in options else None
    # radio gives None until something is picked
    data[field] = st.radio(label, options, index=index, key=f"w_{field}") or ""


def checklist(options, field):
    selected = []
    for option in options:
        if st.checkbox(option, value=option in data.get(field, []), key=f"w_{field}_{option}"):
            selected.append(option)
    data[field] = selected


# --- SIDEBAR ---
with st.sidebar:
    st.header(cs.CLIENT_NAME)
    st.caption(cs.TAGLINE)

    if st.session_state.idx <= TOTAL_SLIDES:
        progress_value = st.session_state.idx / TOTAL_SLIDES
        st.progress(progress_value, text=f"Step {st.session_state.idx} of {TOTAL_SLIDES}")

    with st.expander("💼 Admin Dashboard"):
        admin_pass = st.secrets.get("ADMIN_PASS")
        if admin_pass and st.text_input("Admin Pass", type="password") == admin_pass:
            st.dataframe(load_logs())

st.title(f"💇‍♀️ {cs.APP_TITLE}")
idx = st.session_state.idx

# ==========================================
# SLIDE 1: PERSONAL INFORMATION
# ==========================================
if idx == 1:
    st.subheader("Tell us a little about yourself")
    c1, c2 = st.columns(2)
    data["first_name"] = c1.text_input("First Name", value=data.get("first_name", ""))
    data["last_name"] = c2.text_input("Last Name", value=data.get("last_name", ""))
    c3, c4 = st.columns(2)
    data["email"] = c3.text_input("Email", value=data.get("email", ""), placeholder="example@example.com")
    phone = c4.text_input("Phone Number", value=data.get("phone", ""))
    data["phone"] = "".join(ch for ch in phone if ch.isdigit() or ch == "+")
    nav(bool(data["first_name"] and data["email"]), "Please enter at least your first name and email.")

# ==========================================
# SLIDE 2: NATURAL FEATURES
# ==========================================
elif idx == 2:
    st.subheader("Your natural features")
    c1, c2 = st.columns(2)
    with c1:
        choice("Your Natural Hair Color", list(NATURAL_HAIR_COLORS), "natural_hair_color")
        choice("Eye Color", list(EYE_COLORS), "eye_color")
    with c2:
        choice("Skin Tone", list(SKIN_TONES), "skin_color")
        choice("Hair Texture", list(HAIR_TEXTURES), "hair_texture")
    nav()

# ==========================================
# SLIDES 3-6: THE RECOMMENDATION INPUTS
# ==========================================
elif idx == 3:
    st.subheader("Which hair color are you looking for?")
    choice("Hair color", list(SELECTED_HAIR_COLORS), "selected_hair_color")
    nav(bool(data.get("selected_hair_color")))

elif idx == 4:
    st.subheader("Your hair length")
    choice("Length", [length.value for length in HairLength], "hair_length")
    nav(bool(data.get("hair_length")))

elif idx == 5:
    st.subheader("Your personal style")
    choice("Style", [style.value for style in PersonalStyle], "personal_style")
    nav(bool(data.get("personal_style")))

elif idx == 6:
    st.subheader("Your hair maintenance routine?")
    choice("Maintenance", list(MAINTENANCE_OPTIONS), "hair_maintenance")
    nav()

# ==========================================
# SLIDES 7-8: OCCASIONS & TREATMENTS
# ==========================================
elif idx == 7:
    st.subheader("Which occasions do you choose your hair treatments frequently?")
    checklist(OCCASIONS, "special_occasions")
    nav()

elif idx == 8:
    st.subheader("Which treatments do you prefer presently or would like to try in future?")
    checklist(TREATMENTS, "preferred_treatments")
    nav()

# ==========================================
# SLIDE 9: INSPIRATION UPLOADS
# ==========================================
elif idx == 9:
    st.subheader("Upload some styles that inspire you")
    st.caption("(Optional you can skip to the next)")
    files = st.file_uploader("Choose Files", type=["jpg", "jpeg", "png", "gif", "webp"],
                             accept_multiple_files=True)
    if files:
        if len(files) > MAX_INSPIRATION_UPLOADS:
            st.warning(f"You can only upload up to {MAX_INSPIRATION_UPLOADS} image files")
        else:
            st.session_state.uploads = [(f.name, f.getvalue()) for f in files]
    for name, _ in st.session_state.uploads:
        st.write(f"🖼️ {name}")
    nav()

# ==========================================
# SLIDE 10: WORK
# ==========================================
elif idx == 10:
    st.subheader("Work")
    st.caption("(Optional you can skip to next)")
    choice("Work type", list(WORK_TYPES), "work_type")
    if data.get("work_type") in INDUSTRY_WORK_TYPES:
        data["work_industry"] = st.text_input("Please specify industry", value=data.get("work_industry", ""),
                                              placeholder="e.g., Technology, Healthcare, Finance...")
    else:
        data["work_industry"] = ""
    nav()

# ==========================================
# SLIDE 11: PERFECT HAIR DAYS
# ==========================================
elif idx == 11:
    st.subheader("Select Your Perfect Hair Days")
    st.write("Select some of your most important days of the year when you would like to look your very best. "
             "Let us send you a reminder 2 weeks before to consult or set an appointment.")

    c1, c2 = st.columns([3, 1])
    picked = c1.date_input("Calendar", value=date.today())
    if c2.button("➕ Add / Remove"):
        if picked < date.today():
            st.warning("Cannot select past dates. Please choose a future date.")
        elif picked in st.session_state.dates:
            st.session_state.dates.remove(picked)
        else:
            st.session_state.dates.append(picked)

    st.markdown(f"**{len(st.session_state.dates)}** dates selected")
    for d in normalize_dates(st.session_state.dates):
        r1, r2 = st.columns([4, 1])
        r1.write(format_long_date(d))
        if r2.button("✕ Remove", key=f"rm_{d.isoformat()}"):
            st.session_state.dates.remove(d)
            st.rerun()
    if st.session_state.dates and st.button("🗑️ Clear All"):
        st.session_state.dates = []
        st.rerun()
    nav()

# ==========================================
# SLIDE 12: REVIEW & SUBMIT
# ==========================================
elif idx == 12:
    st.subheader("Review & Submit")
    form = ConsultationForm(**data)
    recommendation = resolve(form.profile())

    if recommendation:
        st.markdown(f"### {recommendation.title}")
        st.write(recommendation.description)
        st.markdown("**Hair Care Routine**")
        st.write(recommendation.care_instructions)
        st.markdown("**Maintenance Schedule**")
        for item in recommendation.maintenance_schedule:
            st.write(f"• {item}")

        paths = report_images(form.profile())
        if not paths:
            st.info("💇‍♀️ No images available for this style")
        cols = st.columns(2)
        for i, path in enumerate(paths):
            image = materialize(path, cs.PUBLIC_BASE_URL)
            with cols[i % 2]:
                if image:
                    st.markdown(f'<img src="{image.data_url()}" alt="Style {i + 1}" '
                                f'style="width:100%; border-radius:10px;">', unsafe_allow_html=True)
                    st.caption(f"Style {i + 1}")
                else:
                    st.caption(f"💇‍♀️ Style {i + 1} (image unavailable)")
    else:
        st.info("We don't have a ready-made recommendation for this combination yet.")

    st.divider()
    c1, c2 = st.columns(2)
    if c1.button("✏️ Revise Answers"):
        go(1)

    if c2.button("📄 Download PDF & Submit"):
        with st.spinner("Generating your report and sending your consultation..."):
            outcome = run_submission(form, st.session_state.dates)

        if outcome.email.status_code == 400:
            st.warning(outcome.email.body["error"])
        else:
            st.session_state.last_report = outcome.report
            if outcome.report_error:
                st.error(outcome.report_error)
            if outcome.email.ok:
                st.session_state.form_data = {}
                st.session_state.dates = []
                st.session_state.uploads = []
                go(DONE)
            else:
                st.error(outcome.email.body["error"])

    if st.session_state.last_report:
        st.download_button("⬇️ Download PDF", st.session_state.last_report.data,
                           file_name=st.session_state.last_report.filename, mime="application/pdf")

# ==========================================
# DONE
# ==========================================
else:
    st.balloons()
    st.success("✅ Your consultation has been sent! Check your inbox for a copy.")
    report = st.session_state.last_report
    if report:
        st.download_button("⬇️ Download PDF", report.data, file_name=report.filename, mime="application/pdf")
    else:
        st.warning("Failed to generate PDF. Please try again.")
    if st.button("🔄 Start a new consultation"):
        st.session_state.last_report = None
        go(1)
