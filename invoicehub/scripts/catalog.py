"""Catalog of supported providers.

Each entry names the provider key that selects a site script, the label
shown to the user, the page the documents are listed on, and the label of
each credential field the account form asks for.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProviderInfo:
    key: str
    label: str
    url: str
    credentials: dict[str, str] = field(default_factory=dict)


def _p(key: str, label: str, url: str, **credentials: str) -> ProviderInfo:
    fields = {"username": "username", "password": "password"}
    fields.update(credentials)
    return ProviderInfo(
        key=key,
        label=label,
        url=url,
        credentials={k: v for k, v in fields.items() if v},
    )


PROVIDERS: list[ProviderInfo] = [
    _p("123inkt-nl", "123inkt.nl", "https://www.123inkt.nl/customer/invoices.html"),
    _p("activecampaign-partner", "ActiveCampaign - Partner", "https://www.activecampaign.com/partner/invoices.php"),
    _p("amazon-nl", "Amazon NL", "https://www.amazon.nl/gp/css/order-history"),
    _p("ben", "Ben", "https://www.ben.nl/ikben/facturen"),
    _p("bol-particulier", "Bol.com - Particulier", "https://www.bol.com/nl/rnwy/account/facturen/betaald", username="email"),
    _p("bol-retailer", "Bol.com - Retailer", "https://api.bol.com/retailer/invoices", username="clientId", password="clientSecret"),
    _p("bol-zakelijk", "Bol.com - Zakelijk", "https://www.bol.com/nl/rnwy/account/facturen/openstaand", username="email"),
    _p("calendly", "Calendly", "https://calendly.com/app/admin/billing"),
    _p("canva", "Canva", "https://www.canva.com/settings/purchase-history", username="email"),
    _p("channable", "Channable", "https://app.channable.com/companies/STORE_ID/pricing", username="email", account_id="storeId"),
    _p("cheapconnect", "CheapConnect", "https://account.cheapconnect.net/invoices.php", username="email"),
    _p("cloudways", "Cloudways", "https://platform.cloudways.com/account/invoice", username="email"),
    _p("coolblue", "Coolblue", "https://www.coolblue.nl/mijn-coolblue-account/orderoverzicht", username="email"),
    _p("de-kweker", "De Kweker", "https://www.dekweker.nl/mijn-account/facturen-pakbonnen.html", username="email"),
    _p("digital-ocean", "DigitalOcean", "https://cloud.digitalocean.com/account/billing", username="email"),
    _p("dropbox", "Dropbox", "https://www.dropbox.com/manage/billing", username="email"),
    _p("e-boekhouden-nl", "e-Boekhouden.nl", "https://secure20.e-boekhouden.nl/beheer/uwgegevens"),
    _p(
        "facebookads-transactions",
        "Facebook ads - Transactions",
        "https://business.facebook.com/billing_hub/payment_activity",
        username="email",
        account_id="accountId",
        business_id="businessId",
    ),
    _p("fedex", "FedEx", "https://www.fedex.com/fedexbillingonline/pages/accountsummary/accountSummaryFBO.xhtml"),
    _p("gamma", "Gamma", "https://mijn.gamma.nl/mijn-aankopen/", username="email"),
    _p("hollandsnieuwe", "Hollandsnieuwe", "https://www.hollandsnieuwe.nl/mijn-hollandsnieuwe/ACCOUNT_ID/facturen", account_id="accountId"),
    _p("klaviyo", "Klaviyo", "https://www.klaviyo.com/settings/billing/payment-history"),
    _p("later", "Later", "https://app.later.com/account/subscription/billing"),
    _p("lebara", "Lebara", "https://www.lebara.nl/nl/mylebara/postpaid-bills.html", username="email"),
    _p("mailchimp", "Mailchimp", "https://us10.admin.mailchimp.com/account/billing-history/"),
    _p("mailchimp-multi", "Mailchimp - Multi Account", "https://us7.admin.mailchimp.com/account/billing-history/", account_id="accountName"),
    _p("make", "Make", "https://eu2.make.com/organization/ORGANIZATION_ID/payments", username="email"),
    _p("makro", "Makro", "https://docs.makro.nl/", username="email"),
    _p("microsoft-365-personal", "Microsoft 365 - Personal", "https://account.microsoft.com/billing/orders", username="email"),
    _p("mijndomein", "Mijndomein", "https://mijnaccount.mijndomein.nl/facturen", username="email"),
    _p("mkb-brandstof", "MKB Brandstof", "https://mijn.mkb-brandstof.nl", username="email"),
    _p("mollie", "Mollie", "https://api.mollie.com/v2/invoices", username="", password="accessToken"),
    _p("moneybird", "Moneybird", "https://moneybird.com", username="email", account_id="accountId"),
    _p("moneybird-portal", "Moneybird - Portal", "https://moneybird.com/", username="link", password="accessCode"),
    _p("myparcel", "MyParcel", "https://backoffice.myparcel.nl/invoices", username="email"),
    _p("ns-zakelijk", "NS Zakelijk", "https://www.ns.nl/mijnnszakelijk/facturen"),
    _p("odido-zakelijk", "Odido Zakelijk", "https://www.odido.nl/zakelijk/my/facturen", username="email"),
    _p("odido-zakelijk-verzamelfacturen", "Odido Zakelijk - Verzamelfacturen", "https://www.odido.nl/zakelijk/my/verzamelfacturen", username="email"),
    _p("openai-platform", "OpenAI - Platform", "https://platform.openai.com/account/billing/history", username="email"),
    _p("orderchamp-seller", "Orderchamp - Seller", "https://www.orderchamp.com/nl/supplier_invoices", username="email"),
    _p("park-line", "Park-line", "https://mijn.park-line.nl/Epms/ClientPages/client/client_invoices.aspx", username="email"),
    _p("park-mobile", "Parkmobile", "https://account.parkmobile.com/invoices/all", username="email"),
    _p("phoenix", "Phoenix", "https://app.phoenixsite.nl/sitemanager#/account/invoices", username="email"),
    _p("pinterest-business", "Pinterest - Business", "https://ads.pinterest.com/login/", account_id="accountId"),
    _p("pixlr", "Pixlr", "https://pixlr.com/nl/myaccount/"),
    _p("plug-and-pay-store", "Plug&Pay - Store", "https://v2.plugandpay.nl/settings/license/invoices", username="email"),
    _p("q-park", "Q-Park", "https://www.q-park.nl/nl-nl/myqpark/myaccount/myinvoices/", username="email"),
    _p("rinkel", "Rinkel", "https://my.rinkel.com/account/billing", username="email"),
    _p("sendcloud", "Sendcloud", "https://app.sendcloud.com/v2/settings/financial/invoices/list", username="email"),
    _p("special-lease", "Special Lease", "https://uwfactuuronline.speciallease.nl/#/documents"),
    _p("shopify", "Shopify", "https://admin.shopify.com/store", username="email", account_id="storeId"),
    _p("simpel", "Simpel", "https://mijn.simpel.nl/facturen?sid=SUBSCRIPTION_ID", account_id="subscriptionId"),
    _p("simyo", "Simyo", "https://mijn.simyo.nl/facturen"),
    _p("spotify", "Spotify", "https://www.spotify.com/nl/account/order-history/subscription/", username="email"),
    _p("tradetracker-publisher", "TradeTracker - Publisher", "https://affiliate.tradetracker.com/financial/invoice"),
    _p("transactiesysteem", "TransactieSysteem", "https://transactiesysteem.nl/mijn-account/orders", username="email"),
    _p("transip", "TransIP", "https://api.transip.nl/v6/invoices", password="accessToken"),
    _p("upwork-client", "Upwork - Client", "https://www.upwork.com/nx/payments/reports/transaction-history"),
    _p("upwork-freelancer", "Upwork - Freelancer", "https://www.upwork.com/nx/payments/reports/transaction-history#"),
    _p("versio-oud-portaal", "Versio - Oud portaal", "https://www.versio.nl/customer/financial/invoices", username="email"),
    _p("verzamelsysteem", "VerzamelSysteem", "https://verzamelsysteem.nl/mijn-account/orders", username="email"),
    _p("vimexx", "Vimexx", "https://my.vimexx.nl/order", username="email"),
    _p("vodafone-zakelijk", "Vodafone Zakelijk", "https://www.vodafone.nl/my/rekeningen", username="email"),
    _p("voys", "Voys", "https://freedom.voys.nl/client/CLIENT_ID/twinfield/invoices/", username="email"),
    _p("whmcs", "WHMCS", "https://www.whmcs.com/members/clientarea.php?action=invoices", username="email"),
    _p("wpml", "WPML", "https://wpml.org/account/view_order/"),
    _p("yellowbrick", "Yellowbrick", "https://my.yellowbrick.nl/#/profile/payment", username="email"),
    _p("youfone-simonly", "Youfone - Sim Only", "https://my.youfone.nl/facturen", username="email", account_id="subscriptionId"),
    _p("zapier", "Zapier", "https://zapier.com/app/settings/billing", username="email"),
    _p("ziggo", "Ziggo", "https://www.ziggo.nl/mijn-ziggo/facturen/overzicht", username="email"),
]

_BY_KEY = {p.key: p for p in PROVIDERS}


def get_providers() -> list[ProviderInfo]:
    """Return the provider catalog sorted by label."""
    return sorted(PROVIDERS, key=lambda p: p.label.lower())


def get_provider(key: str) -> ProviderInfo | None:
    return _BY_KEY.get(key)
