import enum


class ElementType(str, enum.Enum):
    # Inputs
    text = "text"
    email = "email"
    password = "password"
    number = "number"
    date = "date"
    file = "file"
    textarea = "textarea"
    checkbox = "checkbox"
    radio = "radio"
    select = "select"
    url = "url"
    phone = "phone"
    hidden_input = "hidden-input"
    multiselect = "multiselect"
    checkbox_group = "checkbox-group"
    checkbox_blocks = "checkbox-blocks"
    checkbox_tabs = "checkbox-tabs"
    radio_group = "radio-group"
    radio_blocks = "radio-blocks"
    radio_tabs = "radio-tabs"
    toggle = "toggle"
    slider = "slider"
    range_slider = "range-slider"
    vertical_slider = "vertical-slider"
    file_upload = "file-upload"
    multi_file_upload = "multi-file-upload"
    image_upload = "image-upload"
    multi_image_upload = "multi-image-upload"
    matrix = "matrix"
    matrix_table = "matrix-table"
    address = "address"
    street_address = "street-address"
    street_address_line2 = "street-address-line2"
    city = "city"
    state_province = "state-province"
    postal_code = "postal-code"
    full_name = "name"
    first_name = "first-name"
    last_name = "last-name"
    appointment = "appointment"
    rating = "rating"
    captcha = "captcha"
    form_submit = "form_submit"
    # Static content
    h1 = "h1"
    h2 = "h2"
    h3 = "h3"
    h4 = "h4"
    p = "p"
    paragraph = "paragraph"
    quote = "quote"
    image = "image"
    gallery = "gallery"
    link = "link"
    divider = "divider"
    danger_button = "danger-button"
    static_html = "static-html"
    # Layout containers
    container = "container"
    two_columns = "2-columns"
    three_columns = "3-columns"
    four_columns = "4-columns"
    tabs = "tabs"
    steps = "steps"
    grid = "grid"
    table = "table"
    item_list = "list"
    nested_list = "nested-list"


class ElementCategory(str, enum.Enum):
    field = "field"
    content = "content"
    layout = "layout"


class PublishState(str, enum.Enum):
    draft = "draft"
    saved = "saved"
    published = "published"


class ToggleMode(str, enum.Enum):
    default = "Default"
    on = "On"
    off = "Off"


class LayoutSize(str, enum.Enum):
    default = "Default"
    small = "Small"
    medium = "Medium"
    large = "Large"


class LabelAlignment(str, enum.Enum):
    top = "top"
    left = "left"
    right = "right"


class PreviewMode(str, enum.Enum):
    desktop = "desktop"
    tablet = "tablet"
    mobile = "mobile"
