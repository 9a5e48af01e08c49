class PassCertificates:
    """Certificate bundle and identifiers used to sign Apple Wallet passes."""
    def __init__(self, certificate, key, wwdr_certificate, password,
                 pass_type_identifier, team_identifier, organization_name, model_dir=None):
        self.certificate = certificate
        self.key = key
        self.wwdr_certificate = wwdr_certificate
        self.password = password
        self.pass_type_identifier = pass_type_identifier
        self.team_identifier = team_identifier
        self.organization_name = organization_name
        self.model_dir = model_dir

    @classmethod
    def from_config(cls, config):
        return cls(
            certificate=config.pass_certificate,
            key=config.pass_key,
            wwdr_certificate=config.pass_wwdr_certificate,
            password=config.pass_cert_password,
            pass_type_identifier=config.pass_type_identifier,
            team_identifier=config.pass_team_identifier,
            organization_name=config.pass_organization_name,
            model_dir=config.pass_model_dir
        )
